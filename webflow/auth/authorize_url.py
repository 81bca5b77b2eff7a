"""Construction of the provider authorization URL."""

from typing import Dict
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .errors import ConfigError
from .models import FlowConfig


def validate_endpoint(url: str, name: str) -> None:
    """
    Check that a provider endpoint is an absolute URL.

    Args:
        url: Endpoint to check.
        name: Setting name used in the error message.

    Raises:
        ConfigError: If the URL has no scheme or host.
    """
    try:
        parts = urlsplit(url or '')
    except ValueError as e:
        raise ConfigError(f"{name} is not a valid URL: {e}") from e
    if parts.scheme not in ('http', 'https') or not parts.netloc:
        raise ConfigError(f"{name} must be an absolute http(s) URL, got {url!r}")


def build_authorization_url(
    config: FlowConfig,
    state: str,
    redirect_uri: str,
    response_type: str = 'code',
) -> str:
    """
    Build the URL the user is sent to for consent.

    Query parameters already present on ``config.authorize_url`` are kept;
    client_id, response_type, redirect_uri, state and scope replace any
    existing values of the same name.

    Args:
        config: Provider configuration.
        state: Anti-forgery value generated for this flow.
        redirect_uri: Local callback URI the provider redirects to.
        response_type: OAuth2 response type, "code" for this flow.

    Returns:
        The serialized authorization URL.

    Raises:
        ConfigError: If the authorize URL is not absolute.
    """
    validate_endpoint(config.authorize_url, 'authorize_url')
    parts = urlsplit(config.authorize_url)

    managed: Dict[str, str] = dict(config.extra_authorize_params)
    managed.update({
        'client_id': config.client_id,
        'response_type': response_type,
        'redirect_uri': redirect_uri,
        'state': state,
        'scope': config.scope,
    })

    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in managed]
    query.extend(sorted(managed.items()))

    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
