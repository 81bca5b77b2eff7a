"""Local callback server that catches the OAuth redirect and exchanges the code."""

import asyncio
import enum
import logging
import ssl
from typing import Awaitable, Callable, Optional

from aiohttp import web

from .errors import (
    AuthorizationError,
    Cancelled,
    ExchangeError,
    FlowError,
    ListenError,
    StateMismatchError,
)
from .models import AccessToken, CallbackResult, CallbackSettings, FlowResult

logger = logging.getLogger(__name__)

CLOSE_WINDOW_HTML = (
    "<html><head><title>Authorization complete</title></head><body>"
    '<script type="text/javascript">window.close()</script>'
    "<p>You can close this window and return to the app.</p>"
    "</body></html>"
)


class ServerPhase(enum.Enum):
    LISTENING = 'listening'
    VALIDATING = 'validating'
    EXCHANGING = 'exchanging'
    CLOSED = 'closed'


class CallbackServer:
    """Serves the redirect path until one callback has been handled.

    The first request on the redirect path is validated against the expected
    state and, if it matches, its code is handed to ``on_code``. Its outcome
    is delivered exactly once through :meth:`wait`. Other paths get a 404 and
    later redirects are answered without being processed.
    """

    def __init__(
        self,
        settings: CallbackSettings,
        expected_state: str,
        on_code: Callable[[str], Awaitable[AccessToken]],
    ):
        self.settings = settings
        self.expected_state = expected_state
        self._on_code = on_code
        self._phase = ServerPhase.LISTENING
        self._runner: Optional[web.AppRunner] = None
        self._closed = False
        self._result: Optional[asyncio.Future] = None
        self.bound_port: Optional[int] = None

        self.app = web.Application()
        self.app.add_routes([web.get(self._route_path(), self._handle_redirect)])

    def _route_path(self) -> str:
        path = self.settings.path or '/'
        return path if path.startswith('/') else f"/{path}"

    @property
    def phase(self) -> ServerPhase:
        return self._phase

    @property
    def result(self) -> asyncio.Future:
        if self._result is None:
            self._result = asyncio.get_running_loop().create_future()
        return self._result

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.settings.use_tls:
            return None
        ssl_ctx = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        ssl_ctx.load_cert_chain(certfile=self.settings.tls_cert_path, keyfile=self.settings.tls_key_path)
        return ssl_ctx

    async def start(self) -> None:
        """
        Bind the listener.

        Raises:
            ListenError: If the host/port cannot be bound or the TLS material
                cannot be loaded.
        """
        # Create the result slot on the serving loop
        _ = self.result
        runner = web.AppRunner(self.app, shutdown_timeout=5)
        await runner.setup()
        try:
            site = web.TCPSite(
                runner,
                host=self.settings.host.strip("[]"),
                port=self.settings.port,
                ssl_context=self._ssl_context(),
            )
            await site.start()
        except OSError as e:
            await runner.cleanup()
            self._phase = ServerPhase.CLOSED
            self._closed = True
            raise ListenError(
                f"Cannot listen on {self.settings.host}:{self.settings.port}: {e}"
            ) from e

        self._runner = runner
        addresses = runner.addresses
        self.bound_port = addresses[0][1] if addresses else self.settings.port
        logger.info(f"Callback server listening on {self.settings.host}:{self.bound_port}{self._route_path()}")

    def _deliver(self, result: FlowResult) -> bool:
        """Hand ``result`` to the waiting caller unless one was already delivered."""
        future = self.result
        if future.done():
            return False
        future.set_result(result)
        return True

    def _closing_page(self) -> web.Response:
        return web.Response(text=CLOSE_WINDOW_HTML, content_type='text/html')

    async def _handle_redirect(self, request: web.Request) -> web.Response:
        if self._phase is not ServerPhase.LISTENING:
            logger.info(f"Ignoring redirect received while {self._phase.value}")
            return self._closing_page()

        callback = CallbackResult.from_query(request.query)
        self._phase = ServerPhase.VALIDATING

        if callback.state != self.expected_state:
            logger.error("Callback state does not match the issued state; refusing to exchange code")
            self._finish(FlowResult.failure(StateMismatchError("Callback state does not match the issued state")))
            return self._closing_page()

        if callback.error:
            self._finish(FlowResult.failure(AuthorizationError(
                f"Authorization error: {callback.error_description or callback.error}"
            )))
            return self._closing_page()

        if not callback.code:
            self._finish(FlowResult.failure(AuthorizationError("No authorization code received")))
            return self._closing_page()

        self._phase = ServerPhase.EXCHANGING
        try:
            token = await self._on_code(callback.code)
        except FlowError as e:
            logger.error(f"Token exchange failed: {e}")
            self._finish(FlowResult.failure(e))
        except Exception as e:
            logger.exception("Unexpected error during token exchange")
            self._finish(FlowResult.failure(ExchangeError(f"Token exchange failed: {e}")))
        else:
            self._finish(FlowResult.success(token))
        return self._closing_page()

    def _finish(self, result: FlowResult) -> None:
        self._phase = ServerPhase.CLOSED
        self._deliver(result)

    def cancel(self, reason: str = "Authorization flow cancelled") -> bool:
        """Deliver a Cancelled failure unless a result was already delivered."""
        self._phase = ServerPhase.CLOSED
        return self._deliver(FlowResult.failure(Cancelled(reason)))

    async def wait(self) -> FlowResult:
        """Block until a result is delivered, then close the listener."""
        try:
            return await asyncio.shield(self.result)
        finally:
            await self.close()

    async def close(self) -> None:
        """Stop accepting connections. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._phase = ServerPhase.CLOSED
        runner, self._runner = self._runner, None
        if runner is not None:
            await runner.cleanup()
            logger.info("Callback server closed")

    async def __aenter__(self) -> 'CallbackServer':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
