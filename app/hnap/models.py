"""
HNAP based modems.

The Arris S33 and Motorola MB8611 speak the same protocol (same login dance, same multi-query,
same `^` / `|+|` table encoding) but differ in action names, response keys, how the action URI is
quoted and which unit the frequency columns use. A HnapVariant captures those differences;
HnapModem does the rest.
"""

import re
from dataclasses import dataclass

import structlog

from hnap import parse
from hnap.auth import login
from hnap.scrape import StatusQuery, decode_envelope, fetch_status
from modem.base import Modem, ModemConfig
from modem.registry import ModemDescriptor, ModemRegistry
from modem.signal import Signal
from modem.table import TableLayout
from util.const import HNAP_NAMESPACE, HNAP_PATH, MODEM_HOST
from util.http import client_session

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HnapVariant:
    name: str
    # Matched against the identification page or a captured status response
    markers: tuple[re.Pattern, ...]
    query: StatusQuery
    downstream: TableLayout
    upstream: TableLayout
    # Some firmware wants the SOAPAction URI wrapped in double quotes (and signs it that way)
    quote_action: bool = False
    default_base_url: str = f"https://{MODEM_HOST}"

    def action_uri(self, action: str) -> str:
        uri = f"{HNAP_NAMESPACE}/{action}"
        return f'"{uri}"' if self.quote_action else uri

    def probe(self, content: bytes) -> bool:
        return any(marker.search(content) for marker in self.markers)


S33 = HnapVariant(
    name="S33",
    markers=(
        re.compile(rb'<span id="thisModelNumberIs">\s*S33\s*</span>'),
        re.compile(rb'"CustomerConnDownstreamChannel"'),
    ),
    query=StatusQuery(
        downstream_action="GetCustomerStatusDownstreamChannelInfo",
        downstream_key="CustomerConnDownstreamChannel",
        upstream_action="GetCustomerStatusUpstreamChannelInfo",
        upstream_key="CustomerConnUpstreamChannel",
    ),
    downstream=parse.S33_DOWNSTREAM,
    upstream=parse.S33_UPSTREAM,
)

MB8611 = HnapVariant(
    name="MB8611",
    markers=(
        re.compile(rb"\bMB ?8611\b"),
        re.compile(rb'"MotoConnDownstreamChannel"'),
    ),
    query=StatusQuery(
        downstream_action="GetMotoStatusDownstreamChannelInfo",
        downstream_key="MotoConnDownstreamChannel",
        upstream_action="GetMotoStatusUpstreamChannelInfo",
        upstream_key="MotoConnUpstreamChannel",
    ),
    downstream=parse.MB8611_DOWNSTREAM,
    upstream=parse.MB8611_UPSTREAM,
    quote_action=True,
)


class HnapModem(Modem):
    """A modem scraped over HNAP, or replayed from a captured status response."""

    def __init__(self, variant: HnapVariant, config: ModemConfig, fixture: bytes | None = None):
        self._variant = variant
        self._config = config
        self._fixture = fixture

    @property
    def name(self) -> str:
        return self._variant.name

    @property
    def hnap_url(self) -> str:
        return self._config.url(self._variant.default_base_url, HNAP_PATH)

    async def status(self) -> Signal:
        variant = self._variant
        if self._fixture is not None:
            log.debug("Parsing captured status response", modem=self.name)
            envelope = decode_envelope(self._fixture, variant.query)
            return parse.parse_status(envelope, variant.downstream, variant.upstream)

        # No caching of the session between calls; every status call logs in again
        async with client_session(self._config.timeout) as cs:
            session = await login(
                cs,
                self.hnap_url,
                self._config.username,
                self._config.password,
                variant.action_uri,
            )
            envelope = await fetch_status(
                cs, self.hnap_url, session, variant.query, variant.action_uri
            )
        return parse.parse_status(envelope, variant.downstream, variant.upstream)


def descriptor(variant: HnapVariant) -> ModemDescriptor:
    def construct(config: ModemConfig, fixture: bytes | None) -> Modem:
        return HnapModem(variant, config, fixture)

    return ModemDescriptor(
        name=variant.name,
        probe=variant.probe,
        construct=construct,
        default_base_url=variant.default_base_url,
    )


def register(registry: ModemRegistry) -> None:
    registry.register(descriptor(S33))
    registry.register(descriptor(MB8611))
