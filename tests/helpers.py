"""Test doubles for the token endpoint and the user's browser."""

import asyncio
import datetime
import ipaddress
import ssl
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlsplit

import aiohttp
from aiohttp import web
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

TOKEN_PAYLOAD = {
    "access_token": "xyz",
    "token_type": "Bearer",
    "scope": "read",
    "expires_in": 3600,
    "refresh_token": "r1",
}


class TokenEndpointStub:
    """Token endpoint on an OS-assigned port that records every request."""

    def __init__(self, ssl_context: Optional[ssl.SSLContext] = None):
        self.ssl_context = ssl_context
        self.status = 200
        self.payload: Any = dict(TOKEN_PAYLOAD)
        self.raw_body: Optional[str] = None
        self.calls: List[Dict[str, Any]] = []
        self.url = ""
        self._runner: Optional[web.AppRunner] = None

    async def _handle_token(self, request: web.Request) -> web.Response:
        form = await request.post()
        self.calls.append({"form": dict(form), "headers": dict(request.headers)})
        if self.raw_body is not None:
            return web.Response(status=self.status, text=self.raw_body, content_type="application/json")
        return web.json_response(self.payload, status=self.status)

    async def start(self) -> None:
        app = web.Application()
        app.add_routes([web.post("/token", self._handle_token)])
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, "127.0.0.1", 0, ssl_context=self.ssl_context)
        await site.start()
        port = self._runner.addresses[0][1]
        scheme = "https" if self.ssl_context is not None else "http"
        self.url = f"{scheme}://127.0.0.1:{port}/token"

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()


class FakeBrowser:
    """Stands in for the user's browser: follows the authorization URL by
    sending the provider redirect straight to the local listener."""

    def __init__(self, code: str = "ABC123", state: Optional[str] = None, repeat: int = 1, extra_paths=()):
        self.code = code
        self.state = state
        self.repeat = repeat
        self.extra_paths = extra_paths
        self.urls: List[str] = []
        self.responses: List[Any] = []
        self.extra_statuses: List[int] = []
        self.tasks: List[asyncio.Task] = []

    def __call__(self, url: str) -> None:
        self.urls.append(url)
        self.tasks.append(asyncio.ensure_future(self._follow(url)))

    @property
    def sent_query(self) -> Dict[str, str]:
        return dict(parse_qsl(urlsplit(self.urls[-1]).query))

    async def _get(self, session: aiohttp.ClientSession, url: str, params=None):
        async with session.get(url, params=params) as resp:
            return resp.status, await resp.text()

    async def _follow(self, url: str) -> None:
        query = dict(parse_qsl(urlsplit(url).query))
        redirect_uri = query["redirect_uri"]
        params = {"code": self.code, "state": self.state if self.state is not None else query["state"]}
        async with aiohttp.ClientSession() as session:
            for path in self.extra_paths:
                status, _ = await self._get(session, redirect_uri.rstrip("/") + path)
                self.extra_statuses.append(status)
            attempts = [self._get(session, redirect_uri, params) for _ in range(self.repeat)]
            self.responses.extend(await asyncio.gather(*attempts, return_exceptions=True))

    async def settle(self) -> None:
        await asyncio.gather(*self.tasks, return_exceptions=True)


def write_self_signed_cert(directory: Path) -> Tuple[Path, Path]:
    """Write a self-signed certificate for 127.0.0.1 and return (cert, key) paths."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "127.0.0.1")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName(
                [x509.IPAddress(ipaddress.ip_address("127.0.0.1")), x509.DNSName("localhost")]
            ),
            critical=False,
        )
        .sign(key, hashes.SHA256())
    )

    cert_path = directory / "cert.pem"
    key_path = directory / "key.pem"
    key_path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    return cert_path, key_path
