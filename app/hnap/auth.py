"""
HNAP challenge-response login.

The modem's Login.js does the following dance, which we replicate:
  1. POST Action=request  -> server replies with Challenge, PublicKey and a Cookie
  2. PrivateKey    = HMAC_MD5(PublicKey + password, Challenge)
     LoginPassword = HMAC_MD5(PrivateKey, Challenge)
  3. POST Action=login with LoginPassword, signed with HNAP_AUTH; cookies uid + PrivateKey set
  4. body contains "OK" -> logged in

Every request after that has to carry a fresh HNAP_AUTH header:
  HMAC_MD5(PrivateKey, timestamp + action URI) + " " + timestamp
"""

import hashlib
import hmac
import http.cookies
import json
import time
from dataclasses import dataclass
from typing import Any, Callable

import structlog
from aiohttp import ClientSession
from yarl import URL

from err.exceptions import AuthFailedError, ModemNotOkError
from util.const import HNAP_LOGIN_OK

log = structlog.get_logger(__name__)

# Timestamp wraps here, matching the modem's JS
_TIMESTAMP_MODULUS = 2_000_000_000_000


def hmac_md5(key: str, value: str) -> str:
    """The modem uses this for every step of the dance; uppercase hex"""
    return hmac.new(key.encode("utf-8"), value.encode("utf-8"), hashlib.md5).hexdigest().upper()


def timestamp_ms() -> int:
    return (time.time_ns() // 1_000_000) % _TIMESTAMP_MODULUS


def hnap_auth(private_key: str, action_uri: str, timestamp: int | None = None) -> str:
    """HNAP_AUTH header value for one request"""
    if timestamp is None:
        timestamp = timestamp_ms()
    return f"{hmac_md5(private_key, f'{timestamp}{action_uri}')} {timestamp}"


@dataclass(frozen=True)
class HnapSession:
    """Result of a successful login. Lives for exactly one status call."""

    uid: str
    private_key: str

    def auth_header(self, action_uri: str) -> str:
        """Sign a request; must be called per request since the timestamp moves"""
        return hnap_auth(self.private_key, action_uri)

    def cookies(self, secure: bool = True) -> http.cookies.SimpleCookie:
        cookie = http.cookies.SimpleCookie()
        cookie["uid"] = self.uid
        cookie["PrivateKey"] = self.private_key
        for morsel in cookie.values():
            morsel["path"] = "/"
            morsel["secure"] = secure
        return cookie


def _login_payload(action: str, username: str, login_password: str = "") -> dict[str, Any]:
    return {
        "Login": {
            "Action": action,
            "Captcha": "",
            "LoginPassword": login_password,
            "PrivateLogin": "LoginPassword",
            "Username": username,
        }
    }


async def post_action(
    cs: ClientSession,
    hnap_url: str,
    action_uri: str,
    payload: dict[str, Any],
    hnap_auth_header: str | None = None,
) -> bytes:
    """POST one HNAP action and return the raw body; non-2xx raises ModemNotOkError.

    The body is left undecoded; the JSON readers decide what a bad encoding means.
    """
    headers = {
        "SOAPAction": action_uri,
        "Content-Type": "application/json",
    }
    if hnap_auth_header is not None:
        headers["HNAP_AUTH"] = hnap_auth_header

    async with cs.post(hnap_url, data=json.dumps(payload), headers=headers) as resp:
        body = await resp.read()
        log.debug("HNAP response", action=action_uri, status=resp.status, length=len(body))
        if not 200 <= resp.status < 300:
            raise ModemNotOkError(
                f"HNAP call {action_uri} failed.",
                status_code=resp.status,
                payload=body.decode("utf-8", errors="replace"),
            )
        return body


def _read_challenge(body: str | bytes) -> tuple[str, str, str]:
    """Pull (challenge, public key, cookie) out of the Action=request reply"""
    try:
        doc = json.loads(body)
        reply = doc["LoginResponse"]
        challenge = reply["Challenge"]
        public_key = reply["PublicKey"]
        cookie = reply["Cookie"]
        result = reply.get("LoginResult", "")
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise AuthFailedError(f"Unexpected challenge response: {e!r}", payload=body) from e

    if result == "FAILED":
        raise AuthFailedError("Modem refused login request", payload=body)
    if not all(isinstance(v, str) and v for v in (challenge, public_key, cookie)):
        raise AuthFailedError("Challenge response is missing fields", payload=body)
    return challenge, public_key, cookie


def _login_result(body: bytes) -> str:
    """LoginResult of the Action=login reply; "" when the body isn't shaped as expected"""
    try:
        result = json.loads(body)["LoginResponse"]["LoginResult"]
    except (ValueError, KeyError, TypeError):
        return ""
    return result if isinstance(result, str) else ""


async def login(
    cs: ClientSession,
    hnap_url: str,
    username: str,
    password: str,
    action_uri: Callable[[str], str],
) -> HnapSession:
    """Run the handshake on `cs` and leave its cookie jar authenticated.

    `action_uri` maps an action name to the URI the firmware expects in SOAPAction (and signs).
    """
    login_uri = action_uri("Login")
    log.debug("Requesting login challenge", url=hnap_url, username=username)
    body = await post_action(cs, hnap_url, login_uri, _login_payload("request", username))
    challenge, public_key, cookie = _read_challenge(body)
    log.debug("Login challenge received", challenge_length=len(challenge))

    private_key = hmac_md5(public_key + password, challenge)
    login_password = hmac_md5(private_key, challenge)
    session = HnapSession(uid=cookie, private_key=private_key)

    # Once we auth, the modem uses cookies to keep things going.
    # aiohttp never sends secure cookies over plain http, so only mark them secure on https.
    url = URL(hnap_url)
    cs.cookie_jar.update_cookies(session.cookies(secure=url.scheme == "https"), response_url=url)

    body = await post_action(
        cs,
        hnap_url,
        login_uri,
        _login_payload("login", username, login_password),
        hnap_auth_header=session.auth_header(login_uri),
    )
    if HNAP_LOGIN_OK.encode() not in body:
        log.error("Login rejected", url=hnap_url, login_result=_login_result(body), length=len(body))
        raise AuthFailedError("Login Failed", payload=body)

    log.info("Logged in", url=hnap_url)
    return session
