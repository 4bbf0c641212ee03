"""Accumulation of APB transaction counts, error records and bit activity."""

from __future__ import annotations

from .types import (
    AddressCorruption,
    BitConnectionStatus,
    BitDetailStatus,
    CompleterBitActivity,
    CompleterID,
    DataCorruption,
    DataMirroring,
    OutOfRangeAccess,
    ReadWriteOverlap,
    ReverseWriteInfo,
    TransactionTimeout,
)

_DEFAULT_WIDTH = 32
_MIN_EVIDENCE_COUNT = 1

# Registers whose contents are driven from outside the bus; a read from one
# of them never counts as mirrored data.
_EXTERNALLY_DRIVEN_REGS = frozenset({0x1A101008, 0x1A100014})


def _count_bit_pairs(combinations: list[list[list[int]]], width: int, value: int) -> None:
    bits = [(value >> i) & 1 for i in range(width)]
    for i, bit_i in enumerate(bits):
        row = combinations[i]
        for j in range(i + 1, width):
            row[j][(bit_i << 1) | bits[j]] += 1


def _find_single_short(
    combinations: list[list[list[int]]],
    details: list[BitDetailStatus],
    width: int,
) -> None:
    """Mark a pair of bits shorted when exactly one pair always moved together."""
    candidates = [
        (i, j)
        for i in range(width)
        for j in range(i + 1, width)
        if not (combinations[i][j][1] or combinations[i][j][2])
        and combinations[i][j][0] >= _MIN_EVIDENCE_COUNT
        and combinations[i][j][3] >= _MIN_EVIDENCE_COUNT
    ]
    if len(candidates) != 1:
        return
    bit_a, bit_b = candidates[0]
    details[bit_a].status = BitConnectionStatus.SHORTED
    details[bit_a].shorted_with = bit_b
    details[bit_b].status = BitConnectionStatus.SHORTED
    details[bit_b].shorted_with = bit_a


class Statistics:
    """Everything the analysis learns about a simulation run."""

    def __init__(self) -> None:
        self.read_no_wait = 0
        self.read_with_wait = 0
        self.write_no_wait = 0
        self.write_with_wait = 0
        self.read_cycles_total = 0
        self.write_cycles_total = 0
        self.bus_active_edges = 0
        self.total_pclk_edges = 0
        self.cpu_elapsed_time_ms = 0.0
        self.first_valid_edge = 0

        self.paddr_width = _DEFAULT_WIDTH
        self.pwdata_width = _DEFAULT_WIDTH
        self.ordered_completers: list[CompleterID] = []
        self.bit_activity: dict[CompleterID, CompleterBitActivity] = {}

        self.out_of_range_details: list[OutOfRangeAccess] = []
        self.timeout_details: list[TransactionTimeout] = []
        self.read_write_overlap_details: list[ReadWriteOverlap] = []
        self.address_corruption_details: list[AddressCorruption] = []
        self.data_corruption_details: list[DataCorruption] = []
        self.data_mirroring_details: list[DataMirroring] = []

        self._shadow_memories: dict[CompleterID, dict[int, tuple[int, int]]] = {}
        self._reverse_writes: dict[int, ReverseWriteInfo] = {}

    # --- data collection -------------------------------------------------

    def record_accessed_completer(self, completer: CompleterID) -> None:
        """Note the first access to a known completer and set up its tables."""
        if not completer.is_known or completer in self.bit_activity:
            return
        self.ordered_completers.append(completer)
        activity = CompleterBitActivity()
        activity.resize(self.paddr_width, self.pwdata_width)
        self.bit_activity[completer] = activity

    def record_paddr(self, completer: CompleterID, paddr: int) -> None:
        """Count the bit pairs of an address sent to ``completer``.

        Raises KeyError if the completer was never recorded as accessed.
        """
        if not completer.is_known:
            return
        activity = self.bit_activity[completer]
        _count_bit_pairs(activity.paddr_combinations, self.paddr_width, paddr)

    def record_pwdata(self, completer: CompleterID, pwdata: int) -> None:
        """Count the bit pairs of write data sent to ``completer``.

        Raises KeyError if the completer was never recorded as accessed.
        """
        if not completer.is_known:
            return
        activity = self.bit_activity[completer]
        _count_bit_pairs(activity.pwdata_combinations, self.pwdata_width, pwdata)

    def update_shadow_memory(self, completer: CompleterID, paddr: int, pwdata: int, timestamp: int) -> None:
        """Remember a completed write for later mirroring checks."""
        if not completer.is_known:
            return
        self._shadow_memories.setdefault(completer, {})[paddr] = (pwdata, timestamp)
        self._reverse_writes[pwdata] = ReverseWriteInfo(paddr, timestamp)

    def check_for_data_mirroring(self, completer: CompleterID, paddr: int, prdata: int, timestamp: int) -> None:
        """Record a mirroring error if a read returns data written elsewhere."""
        if not completer.is_known or paddr in _EXTERNALLY_DRIVEN_REGS:
            return
        if paddr in self._shadow_memories.get(completer, {}):
            return
        original = self._reverse_writes.get(prdata)
        if original is not None and original.address != paddr:
            self.record_data_mirroring(
                DataMirroring(timestamp, paddr, prdata, original.address, original.timestamp)
            )

    def record_read_transaction(self, had_wait: bool, duration: int) -> None:
        if had_wait:
            self.read_with_wait += 1
        else:
            self.read_no_wait += 1
        self.read_cycles_total += duration

    def record_write_transaction(self, had_wait: bool, duration: int) -> None:
        if had_wait:
            self.write_with_wait += 1
        else:
            self.write_no_wait += 1
        self.write_cycles_total += duration

    def record_bus_active_edge(self) -> None:
        self.bus_active_edges += 1

    # --- error records ---------------------------------------------------

    def record_out_of_range_access(self, detail: OutOfRangeAccess) -> None:
        self.out_of_range_details.append(detail)

    def record_timeout(self, detail: TransactionTimeout) -> None:
        self.timeout_details.append(detail)

    def record_read_write_overlap(self, detail: ReadWriteOverlap) -> None:
        self.read_write_overlap_details.append(detail)

    def record_address_corruption(self, detail: AddressCorruption) -> None:
        self.address_corruption_details.append(detail)

    def record_data_corruption(self, detail: DataCorruption) -> None:
        self.data_corruption_details.append(detail)

    def record_data_mirroring(self, detail: DataMirroring) -> None:
        self.data_mirroring_details.append(detail)

    # --- analysis and settings ------------------------------------------

    def set_bus_widths(self, paddr_width: int, pwdata_width: int) -> None:
        """Set the bus widths; non-positive widths fall back to 32."""
        self.paddr_width = paddr_width if paddr_width > 0 else _DEFAULT_WIDTH
        self.pwdata_width = pwdata_width if pwdata_width > 0 else _DEFAULT_WIDTH

    def finalize_bit_activity(self) -> None:
        """Decide for every completer whether one pair of bus bits is shorted."""
        for activity in self.bit_activity.values():
            _find_single_short(activity.paddr_combinations, activity.paddr_bit_details, self.paddr_width)
            _find_single_short(activity.pwdata_combinations, activity.pwdata_bit_details, self.pwdata_width)

    # --- derived figures -------------------------------------------------

    def average_read_cycle(self) -> float:
        count = self.read_no_wait + self.read_with_wait
        return self.read_cycles_total / count if count else 0.0

    def average_write_cycle(self) -> float:
        count = self.write_no_wait + self.write_with_wait
        return self.write_cycles_total / count if count else 0.0

    def _effective_edges(self) -> int:
        """Edges counted after reset was released; 0 if it never was."""
        total = self.total_pclk_edges
        if total == 0:
            return 0
        first = self.first_valid_edge
        if 0 < first <= total:
            return total - first + 1
        if first == 0:
            return 0
        return total

    def bus_utilization(self) -> float:
        """Percentage of post-reset edges on which the bus was selected."""
        edges = self._effective_edges()
        if edges == 0:
            return 0.0
        return self.bus_active_edges / edges * 100.0

    def idle_edges(self) -> int:
        """Post-reset edges on which the bus was not selected."""
        edges = self._effective_edges()
        if edges < self.bus_active_edges:
            return 0
        return edges - self.bus_active_edges

    def unique_completers(self) -> int:
        return len(self.ordered_completers)

    def mirroring_error_count(self) -> int:
        return len(self.data_mirroring_details)