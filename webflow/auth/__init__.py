"""Auth package for the browser-driven OAuth2 authorization code flow."""

from .errors import (
    AuthorizationError,
    BrowserError,
    Cancelled,
    ConfigError,
    ExchangeError,
    FlowError,
    ListenError,
    StateMismatchError,
)
from .models import AccessToken, CallbackResult, CallbackSettings, FlowConfig, FlowResult
from .oauth_manager import OAuthManager, run_flow, run_flow_sync

__all__ = [
    'AccessToken', 'CallbackResult', 'CallbackSettings', 'FlowConfig', 'FlowResult',
    'OAuthManager', 'run_flow', 'run_flow_sync',
    'FlowError', 'ConfigError', 'ListenError', 'BrowserError', 'StateMismatchError',
    'AuthorizationError', 'ExchangeError', 'Cancelled',
]
