"""Command line entry point: analyse a VCD trace and write the APB report."""

from __future__ import annotations

import os
import sys
import time
from os import PathLike
from typing import Sequence

from .analyzer import ApbAnalyzer
from .report import write_report
from .signals import SignalManager
from .statistics import Statistics
from .types import SignalState
from .vcd import EndDefinitions, Timestamp, ValueChange, VarDefinition, parse_vcd_file

_PROG = "apbscope"


def analyze_vcd(path: str | PathLike[str]) -> Statistics:
    """Run the APB analysis over a VCD file and return the collected statistics.

    Raises OSError if the file cannot be read.
    """
    started = time.perf_counter()

    signals = SignalManager()
    statistics = Statistics()
    analyzer = ApbAnalyzer(statistics)
    state = SignalState()
    rising_edges = 0
    last_timestamp = 0

    for event in parse_vcd_file(path):
        if isinstance(event, VarDefinition):
            signals.register_signal(event.id_code, event.type_str, event.width, event.name)
        elif isinstance(event, Timestamp):
            state.timestamp_ps = event.time
            last_timestamp = event.time
        elif isinstance(event, ValueChange):
            if signals.update(event.id_code, event.value, state):
                rising_edges += 1
                analyzer.analyze_edge(state, rising_edges)
        elif isinstance(event, EndDefinitions):
            statistics.set_bus_widths(signals.paddr_width, signals.pwdata_width)

    statistics.total_pclk_edges = rising_edges
    analyzer.finalize(last_timestamp)
    statistics.cpu_elapsed_time_ms = (time.perf_counter() - started) * 1000.0
    return statistics


def main(argv: Sequence[str] | None = None) -> int:
    """Usage: apbscope <input_vcd_file> -o <output_txt_file>."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 3:
        print(f"Usage: {_PROG} <input_vcd_file> -o <output_txt_file>", file=sys.stderr)
        return 1
    vcd_path, output_path = args[0], args[2]

    try:
        out = open(output_path, "w", encoding="utf-8")
    except OSError:
        print(f"Error: Could not open output file: {output_path}", file=sys.stderr)
        return 1

    with out:
        try:
            if os.path.getsize(vcd_path) == 0:
                print(f"Warning: VCD file is empty: {vcd_path}")
            statistics = analyze_vcd(vcd_path)
        except OSError:
            print(f"Error: Could not open VCD file: {vcd_path}", file=sys.stderr)
            print(f"Error: Failed to parse VCD file: {vcd_path}", file=sys.stderr)
            return 1
        write_report(statistics, out)
    return 0


if __name__ == "__main__":
    sys.exit(main())