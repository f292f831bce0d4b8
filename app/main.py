#!/usr/bin/env python3
"""
Main / entry point for the cable modem signal exporter.

"""
import asyncio
from os import getenv

import structlog
from err.exceptions import TRANSPORT_ERRORS, ModemError
from exporter import metrics
from exporter.update import update_modem_metrics, update_signal_metrics
from modem.base import Modem, ModemConfig
from modem.catalog import default_registry
from modem.registry import ModemRegistry
from prometheus_client import start_http_server
from util.const import LogLevel

# cfg-file/arg-arse/clip is overkill for the few things that need to be configured.
# k8s makes it trivial to define env-vars so we'll just use that.
##
# Unset: each model uses its own default (https for HNAP models, http for the SB6121)
MODEM_BASE_URL = getenv("MODEM_BASE_URL")

# support docs don't indicate that the username _can_ be changed
MODEM_USERNAME = getenv("MODEM_USERNAME", "admin")
MODEM_PASSWORD = getenv("MODEM_PASSWORD", "password")
# Replay a captured page / status response instead of talking to a modem
MODEM_FIXTURE_PATH = getenv("MODEM_FIXTURE_PATH")
MODEM_REQUEST_TIMEOUT_SECONDS = float(getenv("MODEM_REQUEST_TIMEOUT_SECONDS", "30"))

# default prometheus_client implementation does not support setting the path, only the port.
METRICS_PORT = int(getenv("METRICS_PORT", "8200"))
METRICS_POLL_INTERVAL_SECONDS = int(getenv("METRICS_POLL_INTERVAL_SECONDS", "60"))


if getenv("LOG_LEVEL") not in LogLevel.__members__ or getenv("LOG_LEVEL") is None:
    print(f"Defaulting to {LogLevel.INFO} log level")
    log_level = LogLevel.INFO
else:
    log_level = LogLevel[getenv("LOG_LEVEL")]  # type: ignore
    print(f"Using log level {log_level.value}")


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(log_level.value)
)

log = structlog.get_logger(__name__)


async def poll_once(registry: ModemRegistry, config: ModemConfig, modem: Modem | None) -> Modem | None:
    """One poll cycle. Returns the modem to use next cycle (None: identify again)."""
    try:
        if modem is None:
            with metrics.s_meta_scrape_time.labels("identify").time():
                modem = await registry.require(config, MODEM_FIXTURE_PATH)
            update_modem_metrics(modem)

        with metrics.s_meta_scrape_time.labels("status").time():
            signal = await modem.status()
        update_signal_metrics(signal)
        metrics.c_meta_scrape_result.labels("ok").inc()

    # Nothing in here is retried; the next poll is the retry.
    except ModemError as e:
        log.error("Poll failed", modem=modem, error=str(e), kind=type(e).__name__)
        metrics.c_meta_scrape_result.labels(type(e).__name__).inc()
    except TRANSPORT_ERRORS as e:
        log.error("Poll failed, could not reach modem", modem=modem, error=str(e), kind=type(e).__name__)
        metrics.c_meta_scrape_result.labels("TransportError").inc()
    # pylint: disable=broad-exception-caught
    except Exception as e:
        _e = "Unforeseen exception. Treating as non-fatal."
        log.error(_e, modem=modem, error=e, kind=type(e).__name__)
        metrics.c_meta_scrape_result.labels("Unexpected").inc()
    return modem


async def main():
    """Main entry point."""
    log.info("Starting up")

    # Built once; read-only from here on
    registry = default_registry()
    config = ModemConfig(
        password=MODEM_PASSWORD,
        username=MODEM_USERNAME,
        base_url=MODEM_BASE_URL,
        timeout=MODEM_REQUEST_TIMEOUT_SECONDS,
    )
    log.info("Known modems", modems=registry.names)

    # In testing, server responds to requests on / and /metrics so there's no real
    #   need to allow customizing the path, I think.
    server, _ = start_http_server(port=METRICS_PORT)
    log.info("Metrics server started", server=server.server_address)

    # One poll at a time, so there is never more than one request in flight to the modem
    modem = None
    while True:
        modem = await poll_once(registry, config, modem)
        log.info(
            f"Sleeping {METRICS_POLL_INTERVAL_SECONDS} seconds before next poll"
        )
        await asyncio.sleep(METRICS_POLL_INTERVAL_SECONDS)


if __name__ == "__main__":
    asyncio.run(main())
