"""
Parsers for the channel tables HNAP firmware returns.

Each table arrives as one string: rows separated by `|+|`, columns by `^`, usually with a trailing
`^` on every row. E.G. one S33 downstream row:

    1^Locked^QAM256^1^441000000^-3^43^0^0^

Column meaning is purely positional and differs between firmware families (including the unit
the frequency is reported in), so each family gets its own TableLayout below.
"""

import structlog

from err.exceptions import DecodeError
from hnap.scrape import StatusEnvelope
from modem.signal import Channel, Downstream, Signal, Upstream
from modem.table import CHANNEL, Column, TableLayout, apply_columns, frequency, parse_number, scaled

log = structlog.get_logger(__name__)

ROW_SEPARATOR = "|+|"
FIELD_SEPARATOR = "^"

##
# Arris S33
##
S33_DOWNSTREAM = TableLayout(
    name="S33 downstream",
    columns=(
        # Just a row counter
        Column("Channel"),
        Column("Lock Status"),
        Column("Modulation", "modulation"),
        Column("Channel ID", CHANNEL),
        Column("Frequency", "frequency_hz", frequency("Hz")),
        Column("Power", "power_level", parse_number),
        Column("SNR", "snr", parse_number),
        Column("Corrected", "correctable", parse_number),
        Column("Uncorrectables", "uncorrectable", parse_number),
    ),
)

S33_UPSTREAM = TableLayout(
    name="S33 upstream",
    columns=(
        Column("Channel"),
        Column("Lock Status", "status"),
        Column("US Channel Type", "modulation"),
        Column("Channel ID", CHANNEL),
        Column("Width"),
        Column("Frequency", "frequency_hz", frequency("Hz")),
        Column("Power", "power_level", parse_number),
    ),
    # S33 always bonds several upstream channels; two or fewer rows means a truncated reply
    min_rows=3,
)

##
# Motorola MB8611: same protocol and row shape, but frequencies come back as bare MHz
##
MB8611_DOWNSTREAM = TableLayout(
    name="MB8611 downstream",
    columns=(
        Column("Channel"),
        Column("Lock Status"),
        Column("Modulation", "modulation"),
        Column("Channel ID", CHANNEL),
        Column("Frequency", "frequency_hz", frequency("MHz")),
        Column("Power", "power_level", parse_number),
        Column("SNR", "snr", parse_number),
        Column("Corrected", "correctable", parse_number),
        Column("Uncorrected", "uncorrectable", parse_number),
    ),
)

MB8611_UPSTREAM = TableLayout(
    name="MB8611 upstream",
    columns=(
        Column("Channel"),
        Column("Lock Status", "status"),
        Column("Channel Type", "modulation"),
        Column("Channel ID", CHANNEL),
        # ksym/sec
        Column("Symbol Rate", "symbol_rate", scaled(1_000)),
        Column("Frequency", "frequency_hz", frequency("MHz")),
        Column("Power", "power_level", parse_number),
    ),
)


def split_rows(raw: str, layout: TableLayout) -> list[list[str]]:
    """Split an encoded table into rows of cells, enforcing the layout's minimum row count"""
    rows = []
    for row in raw.split(ROW_SEPARATOR):
        if not row.strip():
            continue
        cells = row.split(FIELD_SEPARATOR)
        # There's a trailing ^ that we don't want to process
        if cells and cells[-1].strip() == "":
            cells = cells[:-1]
        rows.append([c.strip() for c in cells])

    if not rows:
        raise DecodeError(f"No channels returned in {layout.name} table", payload=raw)
    if len(rows) < layout.min_rows:
        raise DecodeError(
            f"Expected at least {layout.min_rows} rows in {layout.name} table, got {len(rows)}",
            payload=raw,
        )
    return rows


def parse_downstream_table(raw: str, layout: TableLayout) -> dict[Channel, Downstream]:
    channels = {}
    for cells in split_rows(raw, layout):
        channel, fields = apply_columns(layout, cells)
        channels[channel] = Downstream(**fields)
    return channels


def parse_upstream_table(raw: str, layout: TableLayout) -> dict[Channel, Upstream]:
    channels = {}
    for cells in split_rows(raw, layout):
        channel, fields = apply_columns(layout, cells)
        channels[channel] = Upstream(**fields)
    return channels


def parse_status(
    envelope: StatusEnvelope, downstream: TableLayout, upstream: TableLayout
) -> Signal:
    """Turn both encoded tables of a status envelope into a Signal"""
    signal = Signal(
        downstream=parse_downstream_table(envelope.downstream, downstream),
        upstream=parse_upstream_table(envelope.upstream, upstream),
    )
    log.debug(
        "Parsed status",
        downstream=len(signal.downstream),
        upstream=len(signal.upstream),
    )
    return signal
