"""Simple wrappers for the failure states a status scrape can end in"""

import asyncio

from aiohttp import ClientError

# Network/TLS/timeout failures are never wrapped; catch them with this tuple.
# asyncio.CancelledError is not in here; it always propagates.
TRANSPORT_ERRORS = (ClientError, asyncio.TimeoutError)


class ModemError(Exception):
    """Base for every error raised by modem identification or scraping."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message, status_code, payload)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self):
        if self.status_code is None:
            return str(self.message)
        return f"{self.message} (status={self.status_code})"


class ModemNotOkError(ModemError):
    """Exception for non-2xx responses from modem."""


class AuthFailedError(ModemError):
    """Login handshake did not produce a session."""


class DecodeError(ModemError):
    """Envelope or table could not be structurally decoded."""


class NoModemFoundError(ModemError):
    """No registered model recognized the target."""
