"""webflow - OAuth2 authorization code flow for local applications.

Opens the provider consent page in the user's browser, catches the redirect on
a short-lived local listener and exchanges the code for an access token.
"""

from .auth import AccessToken, CallbackSettings, FlowConfig, FlowResult, OAuthManager, run_flow, run_flow_sync

__all__ = ['AccessToken', 'CallbackSettings', 'FlowConfig', 'FlowResult', 'OAuthManager', 'run_flow', 'run_flow_sync']
