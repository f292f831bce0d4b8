"""All the boiler plate / init code for defining metrics.

Channel metrics are labelled by channel plus the descriptive fields (frequency, modulation...) that
identify it, the same way the modem's own status page does.
"""

from prometheus_client import Counter, Gauge, Info, Summary, disable_created_metrics

# By default, client will automatically create a "_created" meta metric for
#   each metric defined below.
# Having the unix epoch time of when the metric was created isn't that useful for us
#   so we'll disable it.
disable_created_metrics()

METRICS_NS = "cablemodem"
META_NS = "meta"

DS_LABELS = ["channel", "frequency_hz", "modulation"]
US_LABELS = ["channel", "frequency_hz", "modulation", "status"]

##
# Meta Metrics
##
# summary comes with both a count and a sum so we don't need to count the number of scrapes ourselves
s_meta_scrape_time = Summary(
    f"{META_NS}_request_duration_seconds",
    "Time spent identifying the modem / taking a status snapshot",
    labelnames=["scrape_target"],
)

c_meta_scrape_result = Counter(
    f"{META_NS}_scrape_result",
    "Count of successful vs failed scrapes",
    # ok, or the class name of whatever went wrong; bounded by the error taxonomy
    labelnames=["result"],
)

i_modem_info = Info(
    f"{METRICS_NS}_modem",
    "Detected modem model",
)

##
# Downstream
##
g_downstream_snr = Gauge(
    f"{METRICS_NS}_downstream_snr_db",
    "Downstream signal-to-noise ratio in dB",
    labelnames=DS_LABELS,
)

g_downstream_power = Gauge(
    f"{METRICS_NS}_downstream_power_level_dbmv",
    "Downstream power level reading in dBmV",
    labelnames=DS_LABELS,
)

# These are running totals on the modem; gauges since we mirror them rather than count ourselves
g_codewords_unerrored = Gauge(
    f"{METRICS_NS}_codewords_unerrored",
    "Unerrored codeword count",
    labelnames=["channel"],
)

g_codewords_correctable = Gauge(
    f"{METRICS_NS}_codewords_correctable",
    "Correctable codeword count",
    labelnames=["channel"],
)

g_codewords_uncorrectable = Gauge(
    f"{METRICS_NS}_codewords_uncorrectable",
    "Uncorrectable codeword count",
    labelnames=["channel"],
)

##
# Upstream
##
g_upstream_power = Gauge(
    f"{METRICS_NS}_upstream_power_level_dbmv",
    "Upstream power level reading in dBmV",
    labelnames=US_LABELS,
)

g_upstream_symbol_rate = Gauge(
    f"{METRICS_NS}_upstream_symbol_rate",
    "Upstream symbol rate in sym/sec",
    labelnames=US_LABELS,
)

# Cleared before every update so series for vanished channels / changed frequencies go away
CHANNEL_METRICS = (
    g_downstream_snr,
    g_downstream_power,
    g_codewords_unerrored,
    g_codewords_correctable,
    g_codewords_uncorrectable,
    g_upstream_power,
    g_upstream_symbol_rate,
)
