"""Mapping of VCD variables to APB signals and decoding of their values."""

from __future__ import annotations

from .types import SignalInfo, SignalState, SignalType

_WHITESPACE = " \t\n\r\f\v"
_UINT32_MASK = 0xFFFFFFFF

_NAME_TO_TYPE = {
    "clk": SignalType.PCLK,
    "pclk": SignalType.PCLK,
    "rst_n": SignalType.PRESETN,
    "presetn": SignalType.PRESETN,
    "paddr": SignalType.PADDR,
    "pwrite": SignalType.PWRITE,
    "psel": SignalType.PSEL,
    "penable": SignalType.PENABLE,
    "pwdata": SignalType.PWDATA,
    "prdata": SignalType.PRDATA,
    "pready": SignalType.PREADY,
}

# Signals stored as a value plus an "unknown" flag on SignalState.
_VALUE_FIELDS = {
    SignalType.PADDR: "paddr",
    SignalType.PWDATA: "pwdata",
    SignalType.PRDATA: "prdata",
}
_FLAG_FIELDS = {
    SignalType.PWRITE: "pwrite",
    SignalType.PSEL: "psel",
    SignalType.PENABLE: "penable",
    SignalType.PREADY: "pready",
}


def deduce_signal_type(hierarchical_name: str, vcd_type: str) -> SignalType:
    """Work out the APB role of a variable from its name and VCD type."""
    if vcd_type == "parameter":
        return SignalType.PARAMETER
    suffix = hierarchical_name.rpartition(".")[2]
    suffix = suffix.partition("[")[0].strip(_WHITESPACE)
    return _NAME_TO_TYPE.get(suffix, SignalType.OTHER)


def parse_vcd_value(value: str) -> tuple[int, bool]:
    """Decode a scalar or ``b``-prefixed binary VCD value.

    Returns the value as a 32-bit unsigned integer and whether it contained
    unknown (x/z) or unparsable digits. Unknown digits read as 0.
    """
    if not value:
        return 0, True
    if len(value) == 1:
        digit = value.lower()
        if digit in "01":
            return int(digit), False
        return 0, True

    digits = value[1:] if value[0].lower() == "b" else value
    result = 0
    has_x = False
    for char in digits.lower():
        result = (result << 1) & _UINT32_MASK
        if char == "1":
            result |= 1
        elif char in "xz":
            has_x = True
        elif char != "0":
            return 0, True
    return result, has_x


class SignalManager:
    """Keeps the declared VCD variables and applies value changes to a state."""

    def __init__(self) -> None:
        self._signals: dict[str, SignalInfo] = {}
        self.paddr_width = 32
        self.pwdata_width = 32
        self.previous_pclk = False

    def register_signal(self, id_code: str, type_str: str, width: int, hierarchical_name: str) -> None:
        """Record a ``$var`` declaration; empty identifiers are ignored."""
        if not id_code:
            return
        info = SignalInfo(
            hierarchical_name=hierarchical_name,
            type=deduce_signal_type(hierarchical_name, type_str),
            bit_width=width,
        )
        if info.type is SignalType.PADDR:
            self.paddr_width = width
        elif info.type is SignalType.PWDATA:
            self.pwdata_width = width
        self._signals[id_code] = info

    def signal_info(self, id_code: str) -> SignalInfo | None:
        """Return the declaration for ``id_code``, or None if it is unknown."""
        return self._signals.get(id_code)

    def update(self, id_code: str, value: str, state: SignalState) -> bool:
        """Apply a value change to ``state``; return True on a rising PCLK edge."""
        info = self._signals.get(id_code)
        if info is None:
            return False

        number, has_x = parse_vcd_value(value)
        kind = info.type

        if kind is SignalType.PCLK:
            level = number != 0
            rose = level and not self.previous_pclk
            state.pclk = level
            self.previous_pclk = level
            return rose
        if kind is SignalType.PRESETN:
            state.presetn = number != 0
        elif kind in _VALUE_FIELDS:
            name = _VALUE_FIELDS[kind]
            setattr(state, name, number)
            setattr(state, f"{name}_has_x", has_x)
        elif kind in _FLAG_FIELDS:
            name = _FLAG_FIELDS[kind]
            setattr(state, name, number != 0)
            setattr(state, f"{name}_has_x", has_x)
        return False