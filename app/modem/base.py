"""Capability every supported modem model exposes, plus the caller supplied settings."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from modem.signal import Signal


@dataclass(frozen=True)
class ModemConfig:
    """Everything a model needs from the caller. The core never reads env-vars / files for these."""

    password: str = "password"
    username: str = "admin"
    # None: each model uses its own default address (some are https-only, some http-only)
    base_url: str | None = None
    # Seconds, applied to every request made during one call
    timeout: float = 30.0

    def url(self, default_base_url: str, path: str = "") -> str:
        base = self.base_url if self.base_url is not None else default_base_url
        return f"{base.rstrip('/')}{path}"


class Modem(ABC):
    """A detected modem. Callers only ever see this; the concrete model stays opaque."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Model name, for labeling/logging"""
        ...

    @abstractmethod
    async def status(self) -> Signal:
        """Take one signal snapshot.

        Every call is self-contained: its own HTTP session and, where the model needs one, its
        own login. Transport errors (and cancellation) propagate unmodified.
        """
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
