"""
Position -> field lookup tables and the tolerant cell conversions used by every parser.

Modems don't label their data in any machine friendly way; the meaning of a value comes from
its position in a row (or the row's position in a table). Rather than a long if/elif on the
index, each table format is described as an ordered tuple of Column descriptors. Supporting a
new firmware layout is then a matter of writing a new tuple.

A single bad cell never fails a parse: conversion falls back to the zero value and logs at debug.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from modem.signal import Channel

log = structlog.get_logger(__name__)

# Pseudo-field for the column that carries the channel ID
CHANNEL = "channel"

_UNIT_SCALE = {
    "hz": 1,
    "khz": 1_000,
    "mhz": 1_000_000,
    "ghz": 1_000_000_000,
}

_FREQ_RE = re.compile(r"^\s*([-+]?\d*\.?\d+)\s*([kmg]?hz)?", re.IGNORECASE)


def text(cell: str) -> str:
    """Collapse whitespace (including the newlines some tables embed)"""
    return " ".join(cell.split())


def parse_number(cell: str) -> float:
    """First whitespace delimited token as a float; '6.2 dBmV' -> 6.2, garbage -> 0.0"""
    tokens = cell.split()
    if not tokens:
        log.debug("Empty numeric cell, using zero value")
        return 0.0
    try:
        value = float(tokens[0])
    except ValueError:
        log.debug("Non-numeric cell, using zero value", cell=cell)
        return 0.0
    if not math.isfinite(value):
        log.debug("Non-finite cell, using zero value", cell=cell)
        return 0.0
    return value


def scaled(factor: float) -> Callable[[str], float]:
    """Numeric converter that also rescales, e.g. Msym/sec -> sym/sec"""

    def convert(cell: str) -> float:
        return parse_number(cell) * factor

    return convert


def frequency(unit: str = "Hz") -> Callable[[str], str]:
    """Converter that renders a frequency cell as "<int> Hz".

    `unit` is what the column reports when the cell has no suffix. Some tables give bare numbers
    in MHz, others in Hz; the unit is only known from the column's position, so it has to be
    declared per column. A suffix in the cell itself ("537000000 Hz", "507.0 MHz") wins.
    """
    default_scale = _UNIT_SCALE[unit.lower()]

    def convert(cell: str) -> str:
        match = _FREQ_RE.match(cell)
        if match is None:
            log.debug("Unparseable frequency cell, using zero value", cell=cell, unit=unit)
            return ""
        value = float(match.group(1))
        scale = default_scale
        if match.group(2) is not None:
            scale = _UNIT_SCALE[match.group(2).lower()]
        return f"{round(value * scale)} Hz"

    return convert


@dataclass(frozen=True)
class Column:
    """One position in a row: what it's called and which record field it feeds (None = ignored)"""

    name: str
    field: str | None = None
    convert: Callable[[str], Any] = text


@dataclass(frozen=True)
class TableLayout:
    name: str
    columns: tuple[Column, ...]
    # Fewer rows than this and the table is treated as structurally broken
    min_rows: int = 1


def apply_columns(layout: TableLayout, cells: list[str]) -> tuple[Channel, dict[str, Any]]:
    """Walk one row of cells through the layout.

    Returns the channel ID (empty string if the row didn't have one) and the converted fields,
    ready to be splatted into a Downstream / Upstream record.
    """
    channel: Channel = ""
    fields: dict[str, Any] = {}
    for idx, cell in enumerate(cells):
        if idx >= len(layout.columns):
            log.warning("Unexpected column in table", table=layout.name, column=idx, cell=cell)
            continue
        column = layout.columns[idx]
        if column.field is None:
            continue
        value = column.convert(cell)
        if column.field == CHANNEL:
            channel = text(cell)
        else:
            fields[column.field] = value
    return channel, fields
