import pytest

from apbscope.vcd import (
    EndDefinitions,
    EndDumpvars,
    Timestamp,
    ValueChange,
    VarDefinition,
    parse_vcd_file,
    parse_vcd_lines,
    split_value_change,
)

SAMPLE = """$timescale 1 ps $end
$scope module top $end
$scope module dut $end
$var wire 1 ! pclk $end
$var wire 32 # paddr [31:0] $end
$upscope $end
$var wire 1 % presetn $end
$upscope $end
$enddefinitions $end
$dumpvars
0!
b0101 #
$end
#0
1!
#10
0!
"""


@pytest.mark.parametrize(
    "line, expected",
    [
        ("1!", ("1", "!")),
        ("x%", ("x", "%")),
        ("b0101 #", ("b0101", "#")),
        ("  0&", ("0", "&")),
        ("!", ("!", "!")),
    ],
)
def test_split_value_change(line, expected):
    assert split_value_change(line) == expected


@pytest.mark.parametrize("line", ["", "   ", "1! ", "b01\t"])
def test_split_value_change_rejects(line):
    assert split_value_change(line) is None


def test_sample_event_sequence():
    events = list(parse_vcd_lines(SAMPLE.splitlines()))
    assert events == [
        VarDefinition("!", "wire", 1, "top.dut.pclk"),
        VarDefinition("#", "wire", 32, "top.dut.paddr"),
        VarDefinition("%", "wire", 1, "top.presetn"),
        EndDefinitions(),
        ValueChange("!", "0"),
        ValueChange("#", "b0101"),
        EndDumpvars(),
        Timestamp(0),
        ValueChange("!", "1"),
        Timestamp(10),
        ValueChange("!", "0"),
    ]


def test_whole_text_chunk_matches_lines():
    assert list(parse_vcd_lines([SAMPLE])) == list(parse_vcd_lines(SAMPLE.splitlines()))


def test_crlf_line_endings():
    text = SAMPLE.replace("\n", "\r\n")
    assert list(parse_vcd_lines([text])) == list(parse_vcd_lines(SAMPLE.splitlines()))


def test_end_dumpvars_only_once():
    events = list(parse_vcd_lines(["$dumpvars", "1!", "#0", "#5", "#7"]))
    assert sum(isinstance(e, EndDumpvars) for e in events) == 1
    assert [e.time for e in events if isinstance(e, Timestamp)] == [0, 5, 7]


def test_no_end_dumpvars_without_dumpvars():
    events = list(parse_vcd_lines(["#3", "1!"]))
    assert events == [Timestamp(3), ValueChange("!", "1")]


def test_bad_timestamp_is_skipped():
    events = list(parse_vcd_lines(["#abc", "#42"]))
    assert events == [Timestamp(42)]


def test_short_var_line_ignored():
    assert list(parse_vcd_lines(["$var wire 1 !"])) == []


def test_upscope_at_top_level_keeps_empty_scope():
    events = list(parse_vcd_lines(["$upscope $end", "$var wire 1 ! psel $end"]))
    assert events == [VarDefinition("!", "wire", 1, "psel")]


def test_blank_lines_skipped():
    assert list(parse_vcd_lines(["", "   ", "\t"])) == []


def test_parse_vcd_file(tmp_path):
    path = tmp_path / "dump.vcd"
    path.write_text(SAMPLE)
    assert list(parse_vcd_file(path)) == list(parse_vcd_lines(SAMPLE.splitlines()))


def test_parse_empty_file(tmp_path):
    path = tmp_path / "empty.vcd"
    path.write_text("")
    assert list(parse_vcd_file(path)) == []


def test_parse_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_vcd_file(tmp_path / "missing.vcd")