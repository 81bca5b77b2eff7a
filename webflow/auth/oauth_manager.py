"""OAuth authorization code flow driven through the user's browser."""

import asyncio
import logging
from typing import Callable, Optional

from .authorize_url import build_authorization_url, validate_endpoint
from .browser import open_url_browser
from .callback_server import CallbackServer
from .errors import BrowserError, FlowError
from .models import AccessToken, CallbackSettings, FlowConfig, FlowResult
from .state import DEFAULT_STATE_LENGTH, generate_state
from .token_exchange import TokenExchanger

logger = logging.getLogger(__name__)


class OAuthManager:
    """Runs one browser-based authorization code flow at a time."""

    def __init__(
        self,
        settings: Optional[CallbackSettings] = None,
        browser_opener: Callable[[str], None] = open_url_browser,
        state_length: int = DEFAULT_STATE_LENGTH,
    ):
        """
        Initialize OAuth manager.

        Args:
            settings: Local listener and exchange options; defaults listen on
                http://localhost:5000.
            browser_opener: Callable that opens a URL in the user's browser and
                raises BrowserError when it cannot.
            state_length: Length of the generated anti-forgery state.
        """
        self.settings = settings or CallbackSettings()
        self._open_browser = browser_opener
        self.state_length = state_length

        logger.info("OAuth Manager initialized")

    def _build_exchanger(self, config: FlowConfig, redirect_uri: str) -> TokenExchanger:
        return TokenExchanger(
            token_url=config.token_url,
            client_id=config.client_id,
            client_secret=config.client_secret,
            redirect_uri=redirect_uri,
            verify_tls=self.settings.verify_tls,
            auth_method=self.settings.token_auth_method,
            timeout=self.settings.exchange_timeout,
        )

    def _launch_browser(self, auth_url: str) -> None:
        logger.info("Open this URL to authenticate (copy/paste if it doesn't open automatically): %s", auth_url)
        if not self.settings.open_browser:
            return
        try:
            self._open_browser(auth_url)
        except BrowserError as e:
            if self.settings.abort_on_browser_error:
                raise
            logger.warning(f"{e.description}. Please copy/paste the URL above into your browser.")

    async def authorization_code_flow(
        self,
        config: FlowConfig,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AccessToken:
        """
        Run a complete authorization code flow with a local callback listener.

        The listener is bound before the browser is opened, so a busy port
        fails the flow without sending the user to the provider.

        Args:
            config: Provider configuration.
            cancel_event: Optional event; setting it aborts the flow.

        Returns:
            The access token issued by the provider.

        Raises:
            ConfigError: If an endpoint is not an absolute URL or the token
                auth method is unknown.
            ListenError: If the local listener cannot be bound.
            BrowserError: If no browser opened and settings require one.
            StateMismatchError: If the redirect carried a foreign state.
            AuthorizationError: If the provider denied the request.
            ExchangeError: If the code could not be exchanged for a token.
            Cancelled: On timeout or when ``cancel_event`` is set.
        """
        validate_endpoint(config.authorize_url, 'authorize_url')
        validate_endpoint(config.token_url, 'token_url')

        state = generate_state(self.state_length)
        exchanger = self._build_exchanger(config, self.settings.redirect_uri)

        async def on_code(code: str) -> AccessToken:
            return await exchanger.exchange(code)

        server = CallbackServer(self.settings, state, on_code)
        await server.start()
        try:
            if server.bound_port and server.bound_port != self.settings.port:
                exchanger.redirect_uri = self.settings.with_port(server.bound_port).redirect_uri
            auth_url = build_authorization_url(config, state, exchanger.redirect_uri)
            self._launch_browser(auth_url)

            result = await self._wait_for_result(server, cancel_event)
        finally:
            await server.close()

        return result.unwrap()

    async def _wait_for_result(self, server: CallbackServer, cancel_event: Optional[asyncio.Event]) -> FlowResult:
        result_task = asyncio.ensure_future(server.wait())
        waiters = {result_task}
        cancel_task = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(waiters, timeout=self.settings.timeout, return_when=asyncio.FIRST_COMPLETED)
            if result_task not in done:
                if cancel_task is not None and cancel_task in done:
                    reason = "Authorization flow cancelled by caller"
                else:
                    reason = f"No callback received within {self.settings.timeout} seconds"
                if server.cancel(reason):
                    logger.warning(reason)
            return await result_task
        finally:
            if cancel_task is not None:
                cancel_task.cancel()
            if not result_task.done():
                result_task.cancel()


async def run_flow(
    config: FlowConfig,
    settings: Optional[CallbackSettings] = None,
    cancel_event: Optional[asyncio.Event] = None,
    browser_opener: Callable[[str], None] = open_url_browser,
) -> FlowResult:
    """Run the flow and return its outcome as a FlowResult instead of raising."""
    manager = OAuthManager(settings, browser_opener=browser_opener)
    try:
        token = await manager.authorization_code_flow(config, cancel_event=cancel_event)
    except FlowError as e:
        logger.error(f"Authorization code flow failed: {e}")
        return FlowResult.failure(e)
    return FlowResult.success(token)


def run_flow_sync(
    config: FlowConfig,
    settings: Optional[CallbackSettings] = None,
    browser_opener: Callable[[str], None] = open_url_browser,
) -> FlowResult:
    """Blocking variant of :func:`run_flow` for callers without an event loop."""
    return asyncio.run(run_flow(config, settings, browser_opener=browser_opener))
