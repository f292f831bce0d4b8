import pytest

from err.exceptions import DecodeError
from hnap import models, parse
from hnap.scrape import StatusEnvelope, decode_envelope
from modem.signal import Downstream, Signal, Upstream

# (channel, frequency Hz, power, snr, corrected); every S33 row is Locked with 0 uncorrectables
S33_DOWNSTREAM_ROWS = [
    ("1", 441000000, -3, 43, 0),
    ("2", 447000000, -3, 43, 0),
    ("3", 453000000, -3, 43, 0),
    ("4", 459000000, -4, 43, 0),
    ("5", 465000000, -3, 43, 0),
    ("6", 471000000, -3, 43, 0),
    ("7", 477000000, -3, 43, 0),
    ("8", 483000000, -3, 43, 0),
    ("9", 489000000, -3, 43, 0),
    ("10", 507000000, -4, 42, 0),
    ("11", 513000000, -4, 43, 0),
    ("12", 519000000, -4, 43, 0),
    ("13", 525000000, -4, 43, 0),
    ("14", 531000000, -4, 42, 0),
    ("15", 537000000, -4, 40, 0),
    ("16", 543000000, -4, 38, 0),
    ("17", 549000000, -4, 40, 0),
    ("18", 555000000, -4, 42, 0),
    ("19", 561000000, -4, 43, 0),
    ("20", 567000000, -4, 42, 0),
    ("21", 573000000, -4, 42, 0),
    ("22", 579000000, -5, 41, 0),
    ("23", 585000000, -5, 42, 0),
    ("24", 591000000, -5, 41, 0),
    ("25", 693000000, -4, 41, 590747125),
    ("26", 597000000, -5, 38, 0),
    ("27", 603000000, -5, 40, 0),
    ("28", 609000000, -5, 41, 0),
    ("29", 615000000, -5, 42, 0),
    ("30", 621000000, -5, 41, 0),
    ("31", 627000000, -5, 41, 0),
    ("32", 633000000, -5, 42, 0),
]


def s33_expected() -> Signal:
    downstream = {
        ch: Downstream(
            modulation="OFDM PLC" if ch == "25" else "QAM256",
            frequency_hz=f"{freq} Hz",
            power_level=power,
            snr=snr,
            correctable=corrected,
            uncorrectable=0,
        )
        for ch, freq, power, snr, corrected in S33_DOWNSTREAM_ROWS
    }
    upstream = {
        "5": Upstream(modulation="SC-QAM", frequency_hz="36500000 Hz", power_level=46.8, status="Locked"),
        "6": Upstream(modulation="SC-QAM", frequency_hz="30100000 Hz", power_level=46.3, status="Not Locked"),
        "7": Upstream(modulation="SC-QAM", frequency_hz="23700000 Hz", power_level=44.0, status="Not Locked"),
        "8": Upstream(modulation="SC-QAM", frequency_hz="17300000 Hz", power_level=41.8, status="Not Locked"),
    }
    return Signal(downstream=downstream, upstream=upstream)


def parse_s33(raw) -> Signal:
    envelope = decode_envelope(raw, models.S33.query)
    return parse.parse_status(envelope, parse.S33_DOWNSTREAM, parse.S33_UPSTREAM)


def test_s33_golden(s33_status):
    signal = parse_s33(s33_status)
    assert len(signal.downstream) == 32
    assert len(signal.upstream) == 4
    assert signal == s33_expected()


def test_s33_single_row():
    ds = parse.parse_downstream_table("1^Locked^QAM256^1^441000000^-3^43^0^0^", parse.S33_DOWNSTREAM)
    assert ds == {
        "1": Downstream(
            modulation="QAM256",
            frequency_hz="441000000 Hz",
            power_level=-3,
            snr=43,
            correctable=0,
            uncorrectable=0,
        )
    }


def test_parse_is_idempotent(s33_status):
    assert parse_s33(s33_status) == parse_s33(s33_status)


def test_mb8611_golden(mb8611_status):
    envelope = decode_envelope(mb8611_status, models.MB8611.query)
    signal = parse.parse_status(envelope, parse.MB8611_DOWNSTREAM, parse.MB8611_UPSTREAM)
    assert signal == Signal(
        downstream={
            "20": Downstream("QAM256", "429000000 Hz", 1.3, 45.4, 26, 0),
            "21": Downstream("QAM256", "435000000 Hz", 1.1, 45.1, 12, 1),
            "33": Downstream("OFDM PLC", "957000000 Hz", -0.4, 41.9, 2215, 0),
        },
        upstream={
            "1": Upstream("SC-QAM", "16400000 Hz", 44.5, "Locked", symbol_rate=5_120_000),
            "2": Upstream("SC-QAM", "22800000 Hz", 45.0, "Locked", symbol_rate=5_120_000),
        },
    )


def test_bad_cells_fall_back_to_zero():
    raw = "1^Locked^QAM256^1^441000000^N/A^^0^0^"
    ds = parse.parse_downstream_table(raw, parse.S33_DOWNSTREAM)["1"]
    assert ds.power_level == 0.0
    assert ds.snr == 0.0
    assert ds.frequency_hz == "441000000 Hz"


def test_trailing_separators_are_optional():
    with_trailing = "1^Locked^QAM256^1^441000000^-3^43^0^0^|+|"
    without = "1^Locked^QAM256^1^441000000^-3^43^0^0"
    assert parse.parse_downstream_table(with_trailing, parse.S33_DOWNSTREAM) == parse.parse_downstream_table(
        without, parse.S33_DOWNSTREAM
    )


def test_repeated_channel_last_row_wins():
    raw = "1^Locked^QAM256^1^441000000^-3^43^0^0^|+|2^Locked^QAM256^1^447000000^-4^40^5^6^"
    ds = parse.parse_downstream_table(raw, parse.S33_DOWNSTREAM)
    assert list(ds) == ["1"]
    assert ds["1"].frequency_hz == "447000000 Hz"


def test_extra_columns_are_ignored():
    raw = "1^Locked^QAM256^1^441000000^-3^43^0^0^extra^"
    ds = parse.parse_downstream_table(raw, parse.S33_DOWNSTREAM)
    assert ds["1"].snr == 43


@pytest.mark.parametrize("raw", ["", "   ", "|+|"])
def test_empty_downstream_is_an_error(raw):
    with pytest.raises(DecodeError):
        parse.parse_downstream_table(raw, parse.S33_DOWNSTREAM)


def test_s33_upstream_needs_three_rows():
    two_rows = "1^Locked^SC-QAM^5^6400000^36500000^46.8^|+|2^Locked^SC-QAM^6^6400000^30100000^46.3^"
    with pytest.raises(DecodeError):
        parse.parse_upstream_table(two_rows, parse.S33_UPSTREAM)

    # The MB8611 happily reports a single bonded upstream
    assert len(parse.parse_upstream_table(two_rows, parse.MB8611_UPSTREAM)) == 2


def test_missing_table_fails_at_parse():
    envelope = decode_envelope(
        '{"GetMultipleHNAPsResponse": {"GetMultipleHNAPsResult": "OK"}}', models.S33.query
    )
    assert envelope == StatusEnvelope(downstream="", upstream="")
    with pytest.raises(DecodeError):
        parse.parse_status(envelope, parse.S33_DOWNSTREAM, parse.S33_UPSTREAM)


@pytest.mark.parametrize(
    "raw",
    [
        "<html>not json</html>",
        b"",
        "[]",
        '{"LoginResponse": {"LoginResult": "OK"}}',
        '{"GetMultipleHNAPsResponse": "OK"}',
    ],
)
def test_decode_envelope_rejects_bad_shapes(raw):
    with pytest.raises(DecodeError) as e:
        decode_envelope(raw, models.S33.query)
    assert e.value.payload == raw
