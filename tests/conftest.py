"""Shared fixtures for the flow tests."""

import pytest
import pytest_asyncio

from webflow.auth.models import CallbackSettings, FlowConfig

from .helpers import TokenEndpointStub


@pytest_asyncio.fixture
async def token_endpoint():
    stub = TokenEndpointStub()
    await stub.start()
    try:
        yield stub
    finally:
        await stub.stop()


@pytest.fixture
def flow_config(token_endpoint) -> FlowConfig:
    return FlowConfig(
        authorize_url="https://provider.example/oauth/authorize?prompt=consent",
        token_url=token_endpoint.url,
        client_id="client",
        client_secret="secret",
        scope="read",
    )


@pytest.fixture
def callback_settings() -> CallbackSettings:
    return CallbackSettings(host="127.0.0.1", port=0, timeout=10)
