"""
Status query against an authenticated HNAP session.

One GetMultipleHNAPs POST asks for the downstream and upstream channel info in one go. From poking
around there are other HNAP actions that can be queried but they aren't useful for signal metrics.
"""

import json
from dataclasses import dataclass
from typing import Callable

import structlog
from aiohttp import ClientSession

from err.exceptions import DecodeError
from hnap.auth import HnapSession, post_action

log = structlog.get_logger(__name__)

MULTI_ACTION = "GetMultipleHNAPs"


@dataclass(frozen=True)
class StatusEnvelope:
    """The two still-encoded channel tables; see hnap.parse"""

    downstream: str
    upstream: str


@dataclass(frozen=True)
class StatusQuery:
    """Action and response key names; these differ per firmware family"""

    downstream_action: str
    downstream_key: str
    upstream_action: str
    upstream_key: str

    def payload(self) -> dict[str, dict[str, str]]:
        return {MULTI_ACTION: {self.downstream_action: "", self.upstream_action: ""}}


def decode_envelope(raw: str | bytes, query: StatusQuery) -> StatusEnvelope:
    """Dig the encoded tables out of a GetMultipleHNAPs response"""
    try:
        doc = json.loads(raw)
    except ValueError as e:
        raise DecodeError(f"Status response is not JSON: {e}", payload=raw) from e

    multi = doc.get(f"{MULTI_ACTION}Response") if isinstance(doc, dict) else None
    if not isinstance(multi, dict):
        raise DecodeError(f"Status response has no {MULTI_ACTION}Response", payload=raw)

    def table(action: str, key: str) -> str:
        # A missing table decodes as empty; the parser decides that's fatal
        response = multi.get(f"{action}Response")
        if not isinstance(response, dict):
            log.warning("Status response is missing action", action=action)
            return ""
        value = response.get(key, "")
        return value if isinstance(value, str) else ""

    return StatusEnvelope(
        downstream=table(query.downstream_action, query.downstream_key),
        upstream=table(query.upstream_action, query.upstream_key),
    )


async def fetch_status(
    cs: ClientSession,
    hnap_url: str,
    session: HnapSession,
    query: StatusQuery,
    action_uri: Callable[[str], str],
) -> StatusEnvelope:
    """Issue the status query on the (already authenticated) session `cs`"""
    uri = action_uri(MULTI_ACTION)
    body = await post_action(
        cs,
        hnap_url,
        uri,
        query.payload(),
        hnap_auth_header=session.auth_header(uri),
    )
    return decode_envelope(body, query)
