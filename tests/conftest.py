"""Shared fixtures: captured modem responses and an in-process fake HNAP modem."""

import asyncio
import json
import ssl
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from hnap.auth import hmac_md5

FIXTURES = Path(__file__).parent / "fixtures"

# Not "password" so a real default never accidentally passes the fake modem's check
TEST_PASSWORD = "pw"


def fixture_path(name: str) -> Path:
    return FIXTURES / name


def load_fixture(name: str) -> bytes:
    return fixture_path(name).read_bytes()


class FakeHnapModem:
    """Modem side of the HNAP handshake.

    Checks the login hash, the HNAP_AUTH signature on every signed request and the session
    cookies on the status query. Records what it was sent so tests can inspect headers / payloads.
    """

    challenge = "5B0F2C7E4A1D9E63"
    public_key = "D6A3B8E11F5C4A92"
    uid = "8hVmFqZ0sXkPq1rT"

    def __init__(self, variant, status_body: bytes, id_page: bytes = b"", password: str = TEST_PASSWORD):
        self.variant = variant
        self.status_body = status_body
        self.id_page = id_page
        self.password = password
        self.requests: list[dict] = []
        self.id_requests = 0
        self.status_code = 200
        # With stall set, the status handler parks on `release` after setting `stalled`
        self.stall = False
        self.stalled = asyncio.Event()
        self.release = asyncio.Event()

    @property
    def private_key(self) -> str:
        return hmac_md5(self.public_key + self.password, self.challenge)

    def signature_ok(self, request: web.Request, action: str) -> bool:
        digest, _, timestamp = request.headers.get("HNAP_AUTH", "").partition(" ")
        return digest == hmac_md5(self.private_key, f"{timestamp}{self.variant.action_uri(action)}")

    def cookies_ok(self, request: web.Request) -> bool:
        return (
            request.cookies.get("uid") == self.uid
            and request.cookies.get("PrivateKey") == self.private_key
        )

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self.handle_id_page)
        app.router.add_post("/HNAP1/", self.handle_hnap)
        return app

    async def handle_id_page(self, request: web.Request) -> web.Response:
        self.id_requests += 1
        return web.Response(body=self.id_page, content_type="text/html")

    async def handle_hnap(self, request: web.Request) -> web.Response:
        soap_action = request.headers.get("SOAPAction", "")
        payload = json.loads(await request.text())
        self.requests.append(
            {"soap_action": soap_action, "headers": dict(request.headers), "payload": payload}
        )

        if soap_action == self.variant.action_uri("Login"):
            login = payload["Login"]
            if login["Action"] == "request":
                return web.json_response(
                    {
                        "LoginResponse": {
                            "Challenge": self.challenge,
                            "Cookie": self.uid,
                            "PublicKey": self.public_key,
                            "LoginResult": "OK",
                        }
                    }
                )
            ok = login["LoginPassword"] == hmac_md5(self.private_key, self.challenge)
            ok = ok and self.signature_ok(request, "Login")
            return web.json_response({"LoginResponse": {"LoginResult": "OK" if ok else "FAILED"}})

        if soap_action == self.variant.action_uri("GetMultipleHNAPs"):
            if self.stall:
                self.stalled.set()
                await self.release.wait()
            if not self.signature_ok(request, "GetMultipleHNAPs"):
                return web.Response(status=401, text="bad signature")
            if not self.cookies_ok(request):
                return web.Response(status=401, text="no session")
            return web.Response(
                body=self.status_body, status=self.status_code, content_type="application/json"
            )

        return web.Response(status=404, text=f"unknown action {soap_action}")


def server_tls_context() -> ssl.SSLContext:
    """Self-signed certificate, like the ones modems ship with"""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.load_cert_chain(fixture_path("modem-cert.pem"), fixture_path("modem-key.pem"))
    return ctx


@pytest_asyncio.fixture
async def serve():
    """Start aiohttp apps on random local ports; returns their base URL"""
    servers = []

    async def start(app: web.Application, tls: bool = False) -> str:
        server = TestServer(app)
        await server.start_server(ssl=server_tls_context() if tls else None)
        servers.append(server)
        return f"{server.scheme}://{server.host}:{server.port}"

    yield start

    for server in servers:
        await server.close()


@pytest.fixture
def s33_status() -> bytes:
    return load_fixture("S33-signal.json")


@pytest.fixture
def mb8611_status() -> bytes:
    return load_fixture("MB8611-signal.json")


@pytest.fixture
def sb6121_page() -> bytes:
    return load_fixture("SB6121-signal.htm")
