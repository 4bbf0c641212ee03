# apbscope

apbscope reads a VCD waveform dump of an APB (AMBA Advanced Peripheral Bus)
system. It writes a plain-text report about the bus traffic it finds.

The report contains:

- the number of read and write transactions, with and without wait states
- the average read and write cycle lengths
- bus utilization and the number of idle cycles, counted from the first
  clock edge after reset is released
- the number of completers accessed (UART, GPIO, SPI master), and the time
  the analysis took
- counts of timeouts, out-of-range accesses, mirrored transactions and
  read-write overlap errors
- the PADDR and PWDATA connection status of each accessed completer. A pair
  of bits is reported as shorted when it is the only pair that was always
  seen with equal values and was seen both low and high.
- a log of every detected error, sorted by timestamp, including address and
  data corruption caused by a shorted pair

A transaction that stays open for more than 100 clock edges counts as a
timeout. Addresses outside the three completer windows count as out-of-range
accesses.

## Installation

```
pip install .
```

## Command line

```
apbscope waveform.vcd -o report.txt
```

The first argument is the VCD file. The third argument is the report file,
and the second is expected to be `-o`. The command exits with status 1 when
it gets too few arguments, or when it cannot open the output or the input
file. An empty VCD file is accepted: the command prints a warning and writes
a report with every figure at zero.

Signals are recognized by the last part of their hierarchical name, with any
`[..]` range removed: `pclk`/`clk`, `presetn`/`rst_n`, `paddr`, `pwrite`,
`psel`, `penable`, `pwdata`, `prdata` and `pready`. The widths of `paddr` and
`pwdata` come from their `$var` declarations and default to 32.

## From Python

```python
from apbscope.cli import analyze_vcd
from apbscope.report import generate_report

stats = analyze_vcd("waveform.vcd")
print(generate_report(stats))
```

The analysis is made of these parts, and you can use each one directly:

- `apbscope.vcd.parse_vcd_file(path)` and `parse_vcd_lines(lines)` yield
  `VarDefinition`, `Timestamp`, `ValueChange`, `EndDefinitions` and
  `EndDumpvars` events.
- `apbscope.signals.SignalManager` registers the declared variables. Its
  `update(id_code, value, state)` applies a value change to a
  `apbscope.types.SignalState` and returns True on a rising clock edge.
- `apbscope.analyzer.ApbAnalyzer` steps the APB state machine through
  `analyze_edge(snapshot, edge_count)`. Its `finalize(final_timestamp)` runs
  the end-of-trace analyses.
- `apbscope.statistics.Statistics` holds the counts and error records.
- `apbscope.report.generate_report(stats)` returns the report as a string.
  `write_report(stats, out)` writes it to a text stream.

## Limitations

- `$timescale` is not interpreted. Timestamps in the report are the raw
  `#` values from the file.
- A value change identifier is taken to be the single last character of the
  line, so VCD files that use multi-character identifiers are not read
  correctly.
- Values wider than 32 bits are truncated to their low 32 bits.
- The only output is the text report. There is no waveform view, and no
  other output format.

## Development

```
pip install -e ".[test]"
pytest
```