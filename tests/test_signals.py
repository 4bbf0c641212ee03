import pytest

from apbscope.signals import SignalManager, deduce_signal_type, parse_vcd_value
from apbscope.types import SignalState, SignalType


@pytest.mark.parametrize(
    "name, expected",
    [
        ("tb.clk", SignalType.PCLK),
        ("tb.dut.pclk", SignalType.PCLK),
        ("rst_n", SignalType.PRESETN),
        ("top.presetn", SignalType.PRESETN),
        ("top.paddr[31:0]", SignalType.PADDR),
        ("top.pwrite", SignalType.PWRITE),
        ("top.psel", SignalType.PSEL),
        ("top.penable", SignalType.PENABLE),
        ("top.pwdata[31:0]", SignalType.PWDATA),
        ("top.prdata", SignalType.PRDATA),
        ("top.pready", SignalType.PREADY),
        ("top.something_else", SignalType.OTHER),
        ("top.PADDR", SignalType.OTHER),
    ],
)
def test_deduce_signal_type(name, expected):
    assert deduce_signal_type(name, "wire") is expected


def test_parameter_type_wins_over_name():
    assert deduce_signal_type("top.paddr", "parameter") is SignalType.PARAMETER


@pytest.mark.parametrize("number", [0, 1, 5, 0x1A100014, 0xFFFFFFFF])
def test_binary_value_round_trip(number):
    assert parse_vcd_value("b" + format(number, "b")) == (number, False)


@pytest.mark.parametrize("digit", ["0", "1"])
def test_scalar_value(digit):
    assert parse_vcd_value(digit) == (int(digit), False)


@pytest.mark.parametrize("value", ["", "x", "z", "X", "q", "b"])
def test_unknown_scalar_or_empty(value):
    number, has_x = parse_vcd_value(value)
    assert has_x
    assert number == 0


def test_unknown_digits_flagged_but_known_digits_kept():
    number, has_x = parse_vcd_value("bx1")
    assert has_x
    assert number == parse_vcd_value("b01")[0]


def test_invalid_digit_aborts():
    assert parse_vcd_value("b10q1") == (0, True)


def test_value_without_prefix_reads_as_binary():
    assert parse_vcd_value("110") == parse_vcd_value("b110")


def test_wide_value_keeps_low_32_bits():
    number, has_x = parse_vcd_value("b1" + "0" * 31 + "1")
    assert not has_x
    assert number == parse_vcd_value("b1")[0]
    assert number < 2**32


@pytest.fixture
def manager():
    mgr = SignalManager()
    mgr.register_signal("!", "wire", 1, "tb.pclk")
    mgr.register_signal('"', "wire", 1, "tb.presetn")
    mgr.register_signal("#", "wire", 16, "tb.paddr[15:0]")
    mgr.register_signal("$", "wire", 1, "tb.psel")
    mgr.register_signal("%", "wire", 8, "tb.pwdata[7:0]")
    return mgr


def test_widths_follow_registered_buses(manager):
    assert manager.paddr_width == 16
    assert manager.pwdata_width == 8


def test_default_widths():
    mgr = SignalManager()
    assert (mgr.paddr_width, mgr.pwdata_width) == (32, 32)


def test_empty_id_is_ignored():
    mgr = SignalManager()
    mgr.register_signal("", "wire", 16, "tb.paddr")
    assert mgr.signal_info("") is None
    assert mgr.paddr_width == 32


def test_signal_info_lookup(manager):
    info = manager.signal_info("#")
    assert info.hierarchical_name == "tb.paddr[15:0]"
    assert info.type is SignalType.PADDR
    assert info.bit_width == 16
    assert manager.signal_info("?") is None


def test_rising_edge_detection(manager):
    state = SignalState()
    assert manager.update("!", "1", state) is True
    assert state.pclk is True
    assert manager.update("!", "1", state) is False
    assert manager.update("!", "0", state) is False
    assert state.pclk is False
    assert manager.update("!", "1", state) is True


def test_bus_value_updates_state(manager):
    state = SignalState()
    assert manager.update("#", "b1010", state) is False
    assert state.paddr == parse_vcd_value("b1010")[0]
    assert not state.paddr_has_x
    manager.update("#", "bx010", state)
    assert state.paddr_has_x


def test_flag_signal_updates_state(manager):
    state = SignalState()
    manager.update("$", "1", state)
    assert state.psel and not state.psel_has_x
    manager.update("$", "x", state)
    assert not state.psel and state.psel_has_x


def test_reset_updates_state(manager):
    state = SignalState()
    manager.update('"', "0", state)
    assert state.presetn is False


def test_unknown_id_leaves_state_alone(manager):
    state = SignalState()
    assert manager.update("?", "1", state) is False
    assert state == SignalState()