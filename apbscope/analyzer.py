"""APB protocol state machine that turns bus snapshots into statistics."""

from __future__ import annotations

from .statistics import Statistics
from .types import (
    AddressCorruption,
    ApbFsmState,
    BitConnectionStatus,
    BitDetailStatus,
    CompleterID,
    DataCorruption,
    OutOfRangeAccess,
    ReadWriteOverlap,
    SignalState,
    TransactionInfo,
    TransactionTimeout,
    completer_for_address,
)

# A transaction still open after this many PCLK edges counts as timed out.
_TIMEOUT_CYCLES = 100


def _first_short(details: list[BitDetailStatus]) -> tuple[int, int] | None:
    """Return the first shorted pair ``(low, high)`` among the bit verdicts."""
    for index, detail in enumerate(details):
        if detail.status is BitConnectionStatus.SHORTED and detail.shorted_with > index:
            return index, detail.shorted_with
    return None


class ApbAnalyzer:
    """Follows APB transfers edge by edge and reports them to ``Statistics``."""

    def __init__(self, statistics: Statistics) -> None:
        self.statistics = statistics
        self.state = ApbFsmState.IDLE
        self.out_of_reset = False
        self.first_valid_edge = 0
        self.completed_transactions: list[TransactionInfo] = []
        self._current = TransactionInfo()
        self._edge = 0
        self._cycle_counter = 0
        self._pending_writes: dict[int, tuple[int, int]] = {}

    def analyze_edge(self, snapshot: SignalState, edge_count: int) -> None:
        """Process the bus state sampled on one rising PCLK edge."""
        self._edge = edge_count
        if not self.out_of_reset:
            if not snapshot.presetn:
                return
            self.out_of_reset = True
            self.first_valid_edge = edge_count

        if self._current.active:
            self._cycle_counter += 1
        if self._check_timeout():
            return

        if snapshot.psel and not snapshot.psel_has_x:
            self.statistics.record_bus_active_edge()

        if self.state is ApbFsmState.IDLE:
            self._handle_idle(snapshot)
        elif self.state is ApbFsmState.SETUP:
            self._handle_setup(snapshot)
        if self.state is ApbFsmState.ACCESS:
            self._handle_access(snapshot)

    def finalize(self, final_timestamp: int) -> None:
        """Drop any unfinished transfer and run the end-of-trace analyses."""
        if self._current.active:
            self._abort()
        self.statistics.first_valid_edge = self.first_valid_edge
        self.statistics.finalize_bit_activity()
        self._detect_corruption()

    # --- state handlers --------------------------------------------------

    def _handle_idle(self, snapshot: SignalState) -> None:
        if not snapshot.psel or snapshot.psel_has_x or snapshot.penable:
            return
        self.state = ApbFsmState.SETUP
        self._current = TransactionInfo(
            active=True,
            start_edge=self._edge,
            start_timestamp=snapshot.timestamp_ps,
            is_write=snapshot.pwrite and not snapshot.pwrite_has_x,
            paddr=snapshot.paddr,
            paddr_has_x=snapshot.paddr_has_x,
            pwdata=snapshot.pwdata,
            pwdata_has_x=snapshot.pwdata_has_x,
            target_completer=(
                CompleterID.UNKNOWN_COMPLETER
                if snapshot.paddr_has_x
                else completer_for_address(snapshot.paddr)
            ),
        )
        self._cycle_counter = 1
        paddr = self._current.paddr
        if self._current.is_write:
            self._pending_writes[paddr] = (snapshot.timestamp_ps, self._edge)
        elif paddr in self._pending_writes:
            self.statistics.record_read_write_overlap(ReadWriteOverlap(snapshot.timestamp_ps, paddr))

    def _handle_setup(self, snapshot: SignalState) -> None:
        if not self._current.active:
            self.state = ApbFsmState.IDLE
            return
        if not snapshot.psel or snapshot.psel_has_x:
            self._abort()
            return
        if snapshot.penable and not snapshot.penable_has_x:
            self.state = ApbFsmState.ACCESS
            self._current.pwdata = snapshot.pwdata
            self._current.pwdata_has_x = snapshot.pwdata_has_x

    def _handle_access(self, snapshot: SignalState) -> None:
        if not self._current.active:
            self.state = ApbFsmState.IDLE
            return
        if snapshot.pready and not snapshot.pready_has_x:
            self._complete(snapshot)
            return
        enable_dropped = not snapshot.penable and not snapshot.penable_has_x
        if not snapshot.psel or snapshot.psel_has_x or enable_dropped:
            self._abort()
            return
        self._current.had_wait_state = True

    # --- helpers ----------------------------------------------------------

    def _abort(self) -> None:
        if self._current.is_write:
            self._pending_writes.pop(self._current.paddr, None)
        self._current = TransactionInfo()
        self.state = ApbFsmState.IDLE

    def _check_timeout(self) -> bool:
        if not self._current.active or self._cycle_counter <= _TIMEOUT_CYCLES:
            return False
        self.statistics.record_timeout(
            TransactionTimeout(self._current.start_timestamp, self._current.paddr)
        )
        self._abort()
        return True

    def _check_out_of_range(self, snapshot: SignalState) -> None:
        current = self._current
        if not current.active or current.paddr_has_x:
            current.is_out_of_range = True
            return
        if current.target_completer is CompleterID.UNKNOWN_COMPLETER:
            current.is_out_of_range = True
            self.statistics.record_out_of_range_access(
                OutOfRangeAccess(snapshot.timestamp_ps, current.paddr)
            )
        else:
            current.is_out_of_range = False

    def _complete(self, snapshot: SignalState) -> None:
        current = self._current
        if not current.active:
            return
        stats = self.statistics
        target = current.target_completer

        if current.is_write:
            self._pending_writes.pop(current.paddr, None)
        stats.record_accessed_completer(target)
        if not current.paddr_has_x:
            stats.record_paddr(target, current.paddr)
        if current.is_write and not snapshot.pwdata_has_x:
            stats.record_pwdata(target, snapshot.pwdata)
        self._check_out_of_range(snapshot)

        duration = self._edge - current.start_edge + 1
        if current.is_write:
            stats.record_write_transaction(current.had_wait_state, duration)
        else:
            stats.record_read_transaction(current.had_wait_state, duration)

        if not current.is_out_of_range and not current.paddr_has_x:
            if current.is_write and not snapshot.pwdata_has_x:
                stats.update_shadow_memory(target, current.paddr, snapshot.pwdata, snapshot.timestamp_ps)
            elif not current.is_write and not snapshot.prdata_has_x:
                stats.check_for_data_mirroring(target, current.paddr, snapshot.prdata, snapshot.timestamp_ps)

        current.pwdata = snapshot.pwdata
        current.pwdata_has_x = snapshot.pwdata_has_x
        self.completed_transactions.append(current)
        self._current = TransactionInfo()
        self.state = ApbFsmState.IDLE

    def _detect_corruption(self) -> None:
        stats = self.statistics
        for transaction in self.completed_transactions:
            if transaction.paddr_has_x or not transaction.target_completer.is_known:
                continue
            activity = stats.bit_activity.get(transaction.target_completer)
            if activity is None:
                continue

            pair = _first_short(activity.paddr_bit_details)
            if pair is not None:
                stats.record_address_corruption(
                    AddressCorruption(transaction.start_timestamp, transaction.paddr, *pair)
                )
                continue

            if transaction.is_write and not transaction.pwdata_has_x:
                pair = _first_short(activity.pwdata_bit_details)
                if pair is not None:
                    stats.record_data_corruption(
                        DataCorruption(
                            transaction.start_timestamp,
                            transaction.paddr,
                            transaction.pwdata,
                            *pair,
                        )
                    )