import structlog

from modem.base import Modem, ModemConfig
from modem.registry import ModemDescriptor, ModemRegistry
from modem.signal import Signal
from sb6121.parse import SIGNATURE, parse_signal
from sb6121.scrape import SIGNAL_PATH, fetch_signal_page
from util.const import MODEM_HOST
from util.http import client_session

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = f"http://{MODEM_HOST}"


class SB6121Modem(Modem):
    def __init__(self, config: ModemConfig, fixture: bytes | None = None):
        self._config = config
        self._fixture = fixture

    @property
    def name(self) -> str:
        return "SB6121"

    @property
    def signal_url(self) -> str:
        return self._config.url(DEFAULT_BASE_URL, SIGNAL_PATH)

    async def status(self) -> Signal:
        if self._fixture is not None:
            return parse_signal(self._fixture)
        async with client_session(self._config.timeout) as cs:
            html = await fetch_signal_page(cs, self.signal_url)
        return parse_signal(html)


def is_sb6121(content: bytes) -> bool:
    return SIGNATURE in content


DESCRIPTOR = ModemDescriptor(
    name="SB6121",
    probe=is_sb6121,
    construct=SB6121Modem,
    default_base_url=DEFAULT_BASE_URL,
    # The signal page doubles as the identification page
    id_path=SIGNAL_PATH,
)


def register(registry: ModemRegistry) -> None:
    registry.register(DESCRIPTOR)
