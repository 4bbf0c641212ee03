"""Core data types shared by the APB bus analysis modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class ApbFsmState(Enum):
    """Phase of the APB protocol state machine."""

    IDLE = "idle"
    SETUP = "setup"
    ACCESS = "access"


class CompleterID(IntEnum):
    """Peripheral addressed by a transaction, ordered as reports list them."""

    UART = 0
    GPIO = 1
    SPI_MASTER = 2
    UNKNOWN_COMPLETER = 3
    NONE = 4

    @property
    def is_known(self) -> bool:
        """True for a real peripheral, False for UNKNOWN_COMPLETER and NONE."""
        return self not in (CompleterID.UNKNOWN_COMPLETER, CompleterID.NONE)


UART_BASE_ADDR = 0x1A100000
UART_END_ADDR = 0x1A100FFF
GPIO_BASE_ADDR = 0x1A101000
GPIO_END_ADDR = 0x1A101FFF
SPI_MASTER_BASE_ADDR = 0x1A102000
SPI_MASTER_END_ADDR = 0x1A102FFF

_ADDRESS_MAP = (
    (UART_BASE_ADDR, UART_END_ADDR, CompleterID.UART),
    (GPIO_BASE_ADDR, GPIO_END_ADDR, CompleterID.GPIO),
    (SPI_MASTER_BASE_ADDR, SPI_MASTER_END_ADDR, CompleterID.SPI_MASTER),
)


def completer_for_address(paddr: int) -> CompleterID:
    """Return the completer whose address window contains ``paddr``."""
    for base, end, completer in _ADDRESS_MAP:
        if base <= paddr <= end:
            return completer
    return CompleterID.UNKNOWN_COMPLETER


@dataclass
class TransactionInfo:
    """A transaction as it is tracked through the bus phases."""

    active: bool = False
    start_edge: int = 0
    start_timestamp: int = 0
    is_write: bool = False
    paddr: int = 0
    paddr_has_x: bool = False
    pwdata: int = 0
    pwdata_has_x: bool = False
    had_wait_state: bool = False
    target_completer: CompleterID = CompleterID.NONE
    is_out_of_range: bool = False


@dataclass
class SignalState:
    """Current value of every APB signal at one point of simulated time."""

    timestamp_ps: int = 0
    pclk: bool = False
    presetn: bool = True
    paddr: int = 0
    paddr_has_x: bool = False
    pwrite: bool = False
    pwrite_has_x: bool = False
    psel: bool = False
    psel_has_x: bool = False
    penable: bool = False
    penable_has_x: bool = False
    pwdata: int = 0
    pwdata_has_x: bool = False
    prdata: int = 0
    prdata_has_x: bool = False
    pready: bool = False
    pready_has_x: bool = False


class SignalType(Enum):
    """Role of a VCD variable on the APB bus."""

    PCLK = "pclk"
    PRESETN = "presetn"
    PADDR = "paddr"
    PWRITE = "pwrite"
    PSEL = "psel"
    PENABLE = "penable"
    PWDATA = "pwdata"
    PRDATA = "prdata"
    PREADY = "pready"
    PARAMETER = "parameter"
    OTHER = "other"


@dataclass
class SignalInfo:
    """What is known about one declared VCD variable."""

    hierarchical_name: str = ""
    type: SignalType = SignalType.OTHER
    bit_width: int = 1


class BitConnectionStatus(Enum):
    """Whether a bus line is wired correctly or shorted to another line."""

    CORRECT = "correct"
    SHORTED = "shorted"


@dataclass
class BitDetailStatus:
    """Connection verdict for a single bus bit."""

    status: BitConnectionStatus = BitConnectionStatus.CORRECT
    shorted_with: int = -1


def _combination_matrix(width: int) -> list[list[list[int]]]:
    return [[[0, 0, 0, 0] for _ in range(width)] for _ in range(width)]


@dataclass
class CompleterBitActivity:
    """Pairwise bit value counts and the per-bit verdicts for one completer.

    ``paddr_combinations[i][j][k]`` counts how often bits ``i`` and ``j`` were
    seen with the value pair ``k = (bit_i << 1) | bit_j``.
    """

    paddr_combinations: list[list[list[int]]] = field(default_factory=list)
    pwdata_combinations: list[list[list[int]]] = field(default_factory=list)
    paddr_bit_details: list[BitDetailStatus] = field(default_factory=list)
    pwdata_bit_details: list[BitDetailStatus] = field(default_factory=list)

    def resize(self, paddr_width: int, pwdata_width: int) -> None:
        """Reset the tables of any bus whose width differs from the one given."""
        if len(self.paddr_bit_details) != paddr_width:
            self.paddr_combinations = _combination_matrix(paddr_width)
            self.paddr_bit_details = [BitDetailStatus() for _ in range(paddr_width)]
        if len(self.pwdata_bit_details) != pwdata_width:
            self.pwdata_combinations = _combination_matrix(pwdata_width)
            self.pwdata_bit_details = [BitDetailStatus() for _ in range(pwdata_width)]


@dataclass(frozen=True)
class OutOfRangeAccess:
    timestamp: int
    paddr: int


@dataclass(frozen=True)
class DataMirroring:
    read_timestamp: int
    mirrored_addr: int
    data_value: int
    original_write_addr: int
    original_write_time: int


@dataclass(frozen=True)
class ReverseWriteInfo:
    address: int
    timestamp: int


@dataclass(frozen=True)
class TransactionTimeout:
    start_timestamp: int
    paddr: int


@dataclass(frozen=True)
class ReadWriteOverlap:
    timestamp: int
    paddr: int


@dataclass(frozen=True)
class AddressCorruption:
    timestamp: int
    corrupted_addr: int
    bit_a: int
    bit_b: int


@dataclass(frozen=True)
class DataCorruption:
    timestamp: int
    paddr: int
    corrupted_pwdata: int
    bit_a: int
    bit_b: int