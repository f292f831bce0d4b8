"""
Push a Signal snapshot into the prometheus metrics.
"""

import structlog

from exporter import metrics
from modem.base import Modem
from modem.signal import Signal

log = structlog.get_logger(__name__)


def update_modem_metrics(modem: Modem) -> None:
    metrics.i_modem_info.info({"model": modem.name})


def update_signal_metrics(signal: Signal) -> None:
    """Replace all channel series with the ones in `signal`"""
    for metric in metrics.CHANNEL_METRICS:
        metric.clear()

    # Sorted so the exposition order is stable from scrape to scrape
    for ch, ds in sorted(signal.downstream.items()):
        log.debug("Downstream", channel=ch, data=ds)
        labels = {"channel": ch, "frequency_hz": ds.frequency_hz, "modulation": ds.modulation}
        metrics.g_downstream_snr.labels(**labels).set(ds.snr)
        metrics.g_downstream_power.labels(**labels).set(ds.power_level)
        metrics.g_codewords_unerrored.labels(channel=ch).set(ds.unerrored)
        metrics.g_codewords_correctable.labels(channel=ch).set(ds.correctable)
        metrics.g_codewords_uncorrectable.labels(channel=ch).set(ds.uncorrectable)

    for ch, us in sorted(signal.upstream.items()):
        log.debug("Upstream", channel=ch, data=us)
        labels = {
            "channel": ch,
            "frequency_hz": us.frequency_hz,
            "modulation": us.modulation,
            "status": us.status,
        }
        metrics.g_upstream_power.labels(**labels).set(us.power_level)
        metrics.g_upstream_symbol_rate.labels(**labels).set(us.symbol_rate)

    log.info(
        "Updated channel metrics",
        downstream=len(signal.downstream),
        upstream=len(signal.upstream),
    )
