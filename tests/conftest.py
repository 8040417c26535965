from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from stub_server import FakeTransport, TestClientSession, create_stub_app

from wwsvc.client.client import WebwareClient
from wwsvc.common.models import ClientConfig

BASE_URL = "https://example.test"


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig.build(
        base_url=BASE_URL,
        vendor_hash="V1",
        app_hash="A1",
        secret="s3cr3t",
        revision=1,
    )


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_client(config: ClientConfig, fake_transport: FakeTransport) -> WebwareClient:
    """Blocking client whose transport replays queued responses."""
    return WebwareClient(config, transport=fake_transport)


@pytest.fixture
def stub_app():
    return create_stub_app()


@pytest.fixture
def stub_state(stub_app):
    return stub_app.state.stub


@pytest.fixture
def stub_client(config: ClientConfig, stub_app):
    """Blocking client wired to the stub server."""
    with TestClient(stub_app) as test_client:
        yield WebwareClient(config, session=TestClientSession(test_client))
