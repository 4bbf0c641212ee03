"""Streaming reader for Value Change Dump (VCD) files."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Union

_MAX_KEYWORD_LINE = 2047
_MAX_FIELDS = 63
_UINT64_LIMIT = 1 << 64

_LINE_BREAK = re.compile(r"[\r\n]+")
_WORD = re.compile(r"[^ \t\n\v\f\r]+")
_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_STOULL = re.compile(r"[ \t\n\v\f\r]*([+-]?)(\d+)")


@dataclass(frozen=True)
class VarDefinition:
    """A ``$var`` declaration with its scope-qualified name."""

    id_code: str
    type_str: str
    width: int
    name: str


@dataclass(frozen=True)
class Timestamp:
    """A ``#<time>`` line."""

    time: int


@dataclass(frozen=True)
class ValueChange:
    """A value assigned to the variable ``id_code``."""

    id_code: str
    value: str


@dataclass(frozen=True)
class EndDefinitions:
    """The ``$enddefinitions`` marker closing the header."""


@dataclass(frozen=True)
class EndDumpvars:
    """The first timestamp after ``$dumpvars``, ending the initial values."""


VcdEvent = Union[VarDefinition, Timestamp, ValueChange, EndDefinitions, EndDumpvars]


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _parse_time(text: str) -> int | None:
    match = _STOULL.match(text)
    if match is None:
        return None
    number = int(match.group(2))
    if number >= _UINT64_LIMIT:
        return None
    if match.group(1) == "-":
        number = -number % _UINT64_LIMIT
    return number


def split_value_change(line: str) -> tuple[str, str] | None:
    """Split a value change line into ``(value, id_code)``.

    The identifier is the single last printable character of the line and
    the value is what precedes it, minus one trailing blank. A lone
    character serves as both. Returns None when the line is not a value
    change.
    """
    line = line.lstrip(" \t\n\v\f\r")
    if not line:
        return None
    id_code = line[-1]
    if not "!" <= id_code <= "~":
        return None
    if len(line) == 1:
        return id_code, id_code
    value = line[:-1]
    if value[-1] in " \t\n\v\f\r":
        value = value[:-1]
    return value, id_code


def _lines(chunks: Iterable[str]) -> Iterator[str]:
    for chunk in chunks:
        yield from _LINE_BREAK.split(chunk)


def parse_vcd_lines(lines: Iterable[str]) -> Iterator[VcdEvent]:
    """Yield the events described by VCD text given as lines or chunks."""
    scope: list[str] = []
    in_dumpvars = False

    for raw in _lines(lines):
        line = raw.lstrip(" \t")
        if not line:
            continue
        first = line[0]

        if first == "$":
            fields = _WORD.findall(line[:_MAX_KEYWORD_LINE])[:_MAX_FIELDS]
            keyword = fields[0]
            if keyword == "$var" and len(fields) >= 5:
                name = ".".join([*scope, fields[4]])
                yield VarDefinition(fields[3], fields[1], _atoi(fields[2]), name)
            elif keyword == "$scope" and len(fields) >= 3:
                scope.append(fields[2])
            elif keyword == "$upscope" and len(fields) >= 2:
                if scope:
                    scope.pop()
            elif keyword == "$enddefinitions":
                yield EndDefinitions()
            elif keyword == "$dumpvars":
                in_dumpvars = True
        elif first == "#":
            if in_dumpvars:
                in_dumpvars = False
                yield EndDumpvars()
            time = _parse_time(line[1:])
            if time is not None:
                yield Timestamp(time)
        else:
            parts = split_value_change(line)
            if parts is not None:
                value, id_code = parts
                yield ValueChange(id_code, value)


def parse_vcd_file(path: str | PathLike[str]) -> Iterator[VcdEvent]:
    """Read a VCD file and return an iterator over its events.

    Raises OSError if the file cannot be read.
    """
    text = Path(path).read_text(encoding="latin-1")
    return parse_vcd_lines([text])