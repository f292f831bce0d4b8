"""
Registry of supported modem models and the probe dispatcher that picks one.

A model registers a ModemDescriptor: a probe (does this content come from me?) and a constructor.
Probes are tried in registration order and the first match wins, so more specific models should
register before more generic ones.

The registry is built once at start-up (see modem.catalog) and handed to whoever needs it;
after that it is only read, so concurrent identify() calls are fine.
"""

from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Callable

import structlog
from aiohttp import ClientSession

from err.exceptions import TRANSPORT_ERRORS, NoModemFoundError
from modem.base import Modem, ModemConfig
from util.const import ID_PAGE_READ_LIMIT
from util.http import client_session, read_limited

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ModemDescriptor:
    name: str
    # Signature match against an identification page or a captured fixture
    probe: Callable[[bytes], bool]
    # (config, fixture content or None) -> Modem; None means a live, network-backed instance
    construct: Callable[[ModemConfig, bytes | None], Modem]
    default_base_url: str
    # Page fetched to identify the model when probing a live device
    id_path: str = "/"

    def id_url(self, config: ModemConfig) -> str:
        return config.url(self.default_base_url, self.id_path)


class ModemRegistry:
    """Insertion ordered set of model descriptors."""

    def __init__(self):
        self._descriptors: list[ModemDescriptor] = []

    def register(self, descriptor: ModemDescriptor) -> None:
        if descriptor.name in self.names:
            raise ValueError(f"Modem {descriptor.name!r} is already registered")
        log.debug("Registered modem", modem=descriptor.name)
        self._descriptors.append(descriptor)

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._descriptors]

    def __iter__(self):
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def match(self, content: bytes) -> ModemDescriptor | None:
        """First descriptor whose probe accepts the content"""
        for descriptor in self._descriptors:
            if descriptor.probe(content):
                return descriptor
        return None

    async def identify(
        self, config: ModemConfig, fixture_path: str | PathLike | None = None
    ) -> Modem | None:
        """Work out which model we're talking to.

        With a fixture, its content is probed and the match replays it instead of touching the
        network. Without one, each model's identification page is fetched (once per distinct URL)
        and probed. Returns None if nothing matched; whether that's fatal is up to the caller.
        """
        if fixture_path is not None:
            content = Path(fixture_path).read_bytes()
            descriptor = self.match(content)
            if descriptor is None:
                log.warning("No registered modem matches fixture", path=str(fixture_path))
                return None
            log.info("Identified modem from fixture", modem=descriptor.name, path=str(fixture_path))
            return descriptor.construct(config, content)

        pages: dict[str, bytes | None] = {}
        async with client_session(config.timeout) as cs:
            for descriptor in self._descriptors:
                url = descriptor.id_url(config)
                if url not in pages:
                    pages[url] = await _fetch_id_page(cs, url)
                content = pages[url]
                if content is not None and descriptor.probe(content):
                    log.info("Identified modem", modem=descriptor.name, url=url)
                    return descriptor.construct(config, None)

        log.warning("No registered modem matched", tried=self.names)
        return None

    async def require(
        self, config: ModemConfig, fixture_path: str | PathLike | None = None
    ) -> Modem:
        """identify(), but no match is an error"""
        modem = await self.identify(config, fixture_path)
        if modem is None:
            raise NoModemFoundError(f"Unsupported modem; tried {', '.join(self.names)}")
        return modem


async def _fetch_id_page(cs: ClientSession, url: str) -> bytes | None:
    log.info("Probing", url=url)
    try:
        async with cs.get(url) as resp:
            # Status is irrelevant here; whatever came back either has the marker or it doesn't
            return await read_limited(resp, ID_PAGE_READ_LIMIT)
    except TRANSPORT_ERRORS as e:
        # A model served on another scheme/port will refuse us; that only rules out this URL
        log.error("Failed to get identification page", url=url, error=str(e))
        return None
