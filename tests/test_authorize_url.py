from urllib.parse import parse_qs, urlsplit

import pytest

from webflow.auth.authorize_url import build_authorization_url, validate_endpoint
from webflow.auth.errors import ConfigError
from webflow.auth.models import FlowConfig

REDIRECT = "http://localhost:5000"


def _config(**overrides):
    values = dict(
        authorize_url="https://provider.example/oauth/authorize",
        token_url="https://provider.example/oauth/token",
        client_id="client",
        client_secret="secret",
        scope="read write",
    )
    values.update(overrides)
    return FlowConfig(**values)


def test_managed_parameters_present():
    url = build_authorization_url(_config(), "abcdefghij", REDIRECT)
    parts = urlsplit(url)
    query = parse_qs(parts.query)

    assert parts.scheme == "https"
    assert parts.netloc == "provider.example"
    assert parts.path == "/oauth/authorize"
    assert query == {
        "client_id": ["client"],
        "response_type": ["code"],
        "redirect_uri": [REDIRECT],
        "state": ["abcdefghij"],
        "scope": ["read write"],
    }


def test_build_is_idempotent():
    config = _config()
    assert build_authorization_url(config, "s1", REDIRECT) == build_authorization_url(config, "s1", REDIRECT)


def test_existing_query_preserved_and_managed_keys_overwritten():
    config = _config(authorize_url="https://provider.example/auth?prompt=consent&state=stale&client_id=old")
    query = parse_qs(urlsplit(build_authorization_url(config, "fresh", REDIRECT)).query)

    assert query["prompt"] == ["consent"]
    assert query["state"] == ["fresh"]
    assert query["client_id"] == ["client"]


def test_extra_authorize_params_included():
    config = _config(extra_authorize_params={"access_type": "offline"})
    query = parse_qs(urlsplit(build_authorization_url(config, "s", REDIRECT)).query)
    assert query["access_type"] == ["offline"]


@pytest.mark.parametrize("bad", ["", "not a url", "/relative/path", "ftp://provider.example/auth"])
def test_invalid_authorize_url_is_config_error(bad):
    with pytest.raises(ConfigError):
        build_authorization_url(_config(authorize_url=bad), "s", REDIRECT)


def test_validate_endpoint_names_setting():
    with pytest.raises(ConfigError) as excinfo:
        validate_endpoint("token", "token_url")
    assert "token_url" in str(excinfo.value)
