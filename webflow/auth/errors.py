"""Error types raised by the browser authorization code flow."""

from typing import Optional
from authlib.integrations.base_client import OAuthError


class FlowError(OAuthError):
    """Base class for every failure of the authorization code flow."""

    error = 'flow_error'

    def __init__(self, description: Optional[str] = None):
        super().__init__(error=self.error, description=description)


class ConfigError(FlowError):
    """Authorize or token endpoint is not a usable absolute URL."""

    error = 'config_error'


class ListenError(FlowError):
    """The local callback listener could not be bound."""

    error = 'listen_error'


class BrowserError(FlowError):
    """No browser could be launched; the user may still navigate manually."""

    error = 'browser_error'


class StateMismatchError(FlowError):
    """The redirect carried a state value that was not issued by this flow."""

    error = 'state_mismatch'


class AuthorizationError(FlowError):
    """The provider redirected back without an authorization code."""

    error = 'authorization_error'


class ExchangeError(FlowError):
    """Exchanging the authorization code for a token failed.

    Attributes:
        status: HTTP status of the token endpoint response, if one was received.
        body: Raw response body, if one was received.
    """

    error = 'exchange_error'

    def __init__(self, description: Optional[str] = None, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(description)
        self.status = status
        self.body = body


class Cancelled(FlowError):
    """The caller aborted the flow or it timed out waiting for the redirect."""

    error = 'cancelled'
