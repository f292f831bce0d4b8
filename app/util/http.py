"""
Transport plumbing shared by every modem model.

Each status scrape gets its own ClientSession (and therefore its own cookie jar and TLS context);
nothing here is cached between calls.
"""

import ssl

from aiohttp import ClientResponse, ClientSession, ClientTimeout, CookieJar, TCPConnector

from util.const import REQUEST_HEADERS


def unverified_ssl_context() -> ssl.SSLContext:
    """TLS context that accepts the modem's self-signed / vendor-private certificate.

    Only ever used against the modem's LAN address; do not reuse for anything on the internet.
    """
    # pylint: disable = protected-access / W0212
    ctx = ssl._create_unverified_context(
        protocol=ssl.PROTOCOL_TLS_CLIENT,
        purpose=ssl.Purpose.SERVER_AUTH,
        check_hostname=False,
    )
    # Older firmware still ships small keys / old ciphers
    ctx.set_ciphers("DEFAULT:@SECLEVEL=0")
    return ctx


def client_session(timeout: float) -> ClientSession:
    """Fresh session for exactly one identification or status call. Use as `async with`."""
    return ClientSession(
        headers=REQUEST_HEADERS,
        # unsafe=True: tell aiohttp to allow cookies on IP addresses
        cookie_jar=CookieJar(unsafe=True),
        connector=TCPConnector(ssl=unverified_ssl_context()),
        timeout=ClientTimeout(total=timeout),
    )


async def read_limited(resp: ClientResponse, limit: int) -> bytes:
    """Read at most `limit` bytes of the body, dropping the rest."""
    chunks = []
    remaining = limit
    while remaining > 0:
        chunk = await resp.content.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
