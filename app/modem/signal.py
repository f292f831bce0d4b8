"""Normalized signal snapshot, independent of which modem produced it."""

from dataclasses import dataclass, field

# Opaque identifier as reported by the modem; unique per direction within a snapshot
Channel = str


@dataclass
class Downstream:
    modulation: str = ""
    # Always "<int> Hz", whatever unit the modem used
    frequency_hz: str = ""
    # dBmV
    power_level: float = 0.0
    # dB
    snr: float = 0.0
    correctable: float = 0.0
    uncorrectable: float = 0.0
    unerrored: float = 0.0


@dataclass
class Upstream:
    modulation: str = ""
    frequency_hz: str = ""
    power_level: float = 0.0
    # Lock / ranging state, e.g. "Locked", "Not Locked", "Success"
    status: str = ""
    # sym/sec
    symbol_rate: float = 0.0
    ranging_service: str = ""


@dataclass
class Signal:
    downstream: dict[Channel, Downstream] = field(default_factory=dict)
    upstream: dict[Channel, Upstream] = field(default_factory=dict)
