import structlog
from aiohttp import ClientSession

from err.exceptions import ModemNotOkError

log = structlog.get_logger(__name__)

SIGNAL_PATH = "/cmSignalData.htm"


async def fetch_signal_page(cs: ClientSession, url: str) -> bytes:
    """Get the raw signal page; the SB6121 serves it without any login"""
    log.debug("Fetching signal page", url=url)
    async with cs.get(url) as resp:
        if not 200 <= resp.status < 300:
            raise ModemNotOkError(
                f"Failed to get signal page. Status={resp.status}",
                status_code=resp.status,
                payload=await resp.text(errors="replace"),
            )
        # Bytes, not text(): the page declares no charset and bs4 sniffs it better than we would
        return await resp.read()
