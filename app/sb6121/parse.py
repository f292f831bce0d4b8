"""
Parser for the SB6121 signal page (cmSignalData.htm).

All top-level tables are immediate children of <center>: downstream, upstream, then codeword stats.
The tables are transposed compared to what you'd expect: every row is one field and every column
is a channel. The first cell of each row is the field label, the first row is the table title.
So the row's position is what tells us which field it holds, e.g. downstream:

    | Downstream                                   |
    | Channel ID            | 1            | 2     |
    | Frequency             | 561000000 Hz | ...   |
    | Signal to Noise Ratio | 38 dB        | ...   |
    ...

The downstream "Power Level" label cell has a nested table with a footnote in it; nested tables
are dropped before rows are read.
"""

from typing import Any

import structlog
from bs4 import BeautifulSoup, Tag

from err.exceptions import DecodeError
from modem.signal import Channel, Downstream, Signal, Upstream
from modem.table import CHANNEL, Column, TableLayout, frequency, parse_number, scaled, text

log = structlog.get_logger(__name__)

# Row layouts; index 0 is the first row after the title
DOWNSTREAM_ROWS = TableLayout(
    name="SB6121 downstream",
    columns=(
        Column("Channel ID", CHANNEL),
        Column("Frequency", "frequency_hz", frequency("Hz")),
        Column("Signal to Noise Ratio", "snr", parse_number),
        Column("Downstream Modulation", "modulation"),
        Column("Power Level", "power_level", parse_number),
    ),
    min_rows=5,
)

UPSTREAM_ROWS = TableLayout(
    name="SB6121 upstream",
    columns=(
        Column("Channel ID", CHANNEL),
        Column("Frequency", "frequency_hz", frequency("Hz")),
        Column("Ranging Service ID", "ranging_service"),
        # Msym/sec
        Column("Symbol Rate", "symbol_rate", scaled(1_000_000)),
        Column("Power Level", "power_level", parse_number),
        Column("Upstream Modulation", "modulation"),
        Column("Ranging Status", "status"),
    ),
    min_rows=7,
)

CODEWORD_ROWS = TableLayout(
    name="SB6121 codewords",
    columns=(
        Column("Channel ID", CHANNEL),
        Column("Total Unerrored Codewords", "unerrored", parse_number),
        Column("Total Correctable Codewords", "correctable", parse_number),
        Column("Total Uncorrectable Codewords", "uncorrectable", parse_number),
    ),
    min_rows=4,
)

# Codeword stats are per downstream channel and get merged into the downstream records
SIGNATURE = b"Signal Stats (Codewords)"


def parse_table(table: Tag, layout: TableLayout) -> dict[Channel, dict[str, Any]]:
    """Read one transposed table into {channel: {field: value}}"""
    for nested in table.find_all("table"):
        nested.decompose()

    # First row is the title
    rows = table.find_all("tr")[1:]
    if len(rows) < layout.min_rows:
        raise DecodeError(
            f"Expected at least {layout.min_rows} rows in {layout.name} table, got {len(rows)}"
        )

    ids: list[Channel] = []
    channels: dict[Channel, dict[str, Any]] = {}
    for row_idx, tr in enumerate(rows):
        if row_idx >= len(layout.columns):
            log.warning("Unhandled row in table", table=layout.name, row=row_idx)
            continue
        column = layout.columns[row_idx]
        # Skip the label cell
        cells = [td.get_text(" ", strip=True) for td in tr.find_all("td")][1:]

        if column.field == CHANNEL:
            ids = [text(c) for c in cells]
            for ch in ids:
                channels.setdefault(ch, {})
            continue
        if column.field is None:
            continue

        for i, cell in enumerate(cells):
            if i >= len(ids):
                log.warning("Cell has no channel", table=layout.name, row=row_idx, column=i)
                continue
            channels[ids[i]][column.field] = column.convert(cell)

    if not channels:
        raise DecodeError(f"No channels returned in {layout.name} table")
    log.debug("Parsed table", table=layout.name, channels=len(channels))
    return channels


def parse_signal(html: str | bytes) -> Signal:
    soup = BeautifulSoup(html, "html.parser")
    # One table has a nested table in a td, which this selector excludes
    tables = soup.select("center > table")
    if len(tables) < 3:
        raise DecodeError(f"Expected 3 signal tables, found {len(tables)}")

    downstream = parse_table(tables[0], DOWNSTREAM_ROWS)
    upstream = parse_table(tables[1], UPSTREAM_ROWS)
    for ch, fields in parse_table(tables[2], CODEWORD_ROWS).items():
        downstream.setdefault(ch, {}).update(fields)

    return Signal(
        downstream={ch: Downstream(**fields) for ch, fields in downstream.items()},
        upstream={ch: Upstream(**fields) for ch, fields in upstream.items()},
    )
