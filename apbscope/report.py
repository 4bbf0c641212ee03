"""Text report summarising APB bus activity and detected faults."""

from __future__ import annotations

from typing import TextIO

from .statistics import Statistics
from .types import BitConnectionStatus, BitDetailStatus


def _bit_status(detail: BitDetailStatus, prefix: str) -> str:
    if detail.status is BitConnectionStatus.SHORTED:
        return f"Connected with {prefix}{detail.shorted_with}"
    return "Correct"


def _connection_lines(details: list[BitDetailStatus], prefix: str) -> list[str]:
    return [
        f"{prefix}{index:02d}: {_bit_status(details[index], prefix)}"
        for index in reversed(range(len(details)))
    ]


def _error_log(stats: Statistics) -> list[tuple[int, str]]:
    errors: list[tuple[int, str]] = []
    for d in stats.out_of_range_details:
        errors.append((d.timestamp, f"Out-of-Range Access -> PADDR 0x{d.paddr:x}"))
    for d in stats.timeout_details:
        errors.append(
            (d.start_timestamp, f"Timeout Occurred -> Transaction Stalled at PADDR 0x{d.paddr:x}")
        )
    for d in stats.read_write_overlap_details:
        errors.append(
            (d.timestamp, f"Read-Write Overlap Error -> Read & Write at PADDR 0x{d.paddr:x} overlapped")
        )
    for d in stats.data_mirroring_details:
        errors.append((
            d.original_write_time,
            f"Address Mirroring -> Write at PADDR 0x{d.original_write_addr:x}"
            f" also reflected at PADDR 0x{d.mirrored_addr:x}",
        ))
        errors.append((
            d.read_timestamp,
            f"Data Mirroring -> Value 0x{d.data_value:x} written at PADDR"
            f" 0x{d.original_write_addr:x} also found at PADDR 0x{d.mirrored_addr:x}",
        ))
    for d in stats.address_corruption_details:
        errors.append((
            d.timestamp,
            f"Address Corruption -> Expected PADDR: 0x{d.corrupted_addr:x},"
            f" Received: 0x{d.corrupted_addr:x} (a{d.bit_a:x}-a{d.bit_b:x} Floating)",
        ))
    for d in stats.data_corruption_details:
        errors.append((
            d.timestamp,
            f"Data Corruption -> Expected PWDATA: 0x{d.corrupted_pwdata:x},"
            f" Received: 0x{d.corrupted_pwdata:x} (d{d.bit_a:x}-d{d.bit_b:x} Floating)",
        ))
    return sorted(errors, key=lambda entry: entry[0])


def generate_report(stats: Statistics) -> str:
    """Render the full transaction, connection and error report."""
    lines = [
        f"1. Number of Read Transactions with no wait states: {stats.read_no_wait}",
        f"2. Number of Read Transactions with wait states: {stats.read_with_wait}",
        f"3. Number of Write Transactions with no wait states: {stats.write_no_wait}",
        f"4. Number of Write Transactions with wait states: {stats.write_with_wait}",
        f"5. Average Read Cycle: {stats.average_read_cycle():.2f} cycles",
        f"6. Average Write Cycle: {stats.average_write_cycle():.2f} cycles",
        f"7. Bus Utilization: {stats.bus_utilization():.2f}%",
        f"8. Number of Idle Cycles: {stats.idle_edges()}",
        f"9. Number of Completer: {stats.unique_completers()}",
        f"10. CPU Elapsed Time: {stats.cpu_elapsed_time_ms:.2f} ms",
        "",
        f"Number of Transactions with Timeout: {len(stats.timeout_details)}",
        f"Number of Out-of-Range Accesses: {len(stats.out_of_range_details)}",
        f"Number of Mirrored Transactions: {stats.mirroring_error_count()}",
        f"Number of Read-Write Overlap Errors: {len(stats.read_write_overlap_details)}",
    ]

    for number, completer in enumerate(stats.ordered_completers, start=1):
        activity = stats.bit_activity.get(completer)
        lines += ["", f"Completer {number} PADDR Connections"]
        if activity is not None:
            lines += _connection_lines(activity.paddr_bit_details, "a")
        lines += ["", f"Completer {number} PWDATA Connections"]
        if activity is not None:
            lines += _connection_lines(activity.pwdata_bit_details, "d")

    lines.append("")
    lines += [f"[#{timestamp}] {message}" for timestamp, message in _error_log(stats)]
    return "\n".join(lines) + "\n"


def write_report(stats: Statistics, out: TextIO) -> None:
    """Write the report to a text stream."""
    out.write(generate_report(stats))