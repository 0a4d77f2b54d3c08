"""Shared fixtures: a scripted upstream behind httpx.MockTransport."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from payrelay.common.config import CommonSettings
from payrelay.services.gateway.forwarder import PaymentForwarder
from payrelay.services.gateway.main import create_app


UPSTREAM_URL = "https://upstream.test/functions/v1/transactions"
SECRET = "sk_test_123"


class FakeUpstream:
    """Records every request and answers with a scripted handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder = lambda request: httpx.Response(200, json={"id": "tx_1"})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def reply(self, status_code: int, **kwargs) -> None:
        self.responder = lambda request: httpx.Response(status_code, **kwargs)

    def fail_with(self, exc_type: type[httpx.RequestError], message: str) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise exc_type(message, request=request)

        self.responder = responder

    def echo(self) -> None:
        self.responder = lambda request: httpx.Response(200, json={"echo": json.loads(request.content)})

    def sent_json(self, index: int = -1):
        return json.loads(self.requests[index].content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def forwarder(upstream: FakeUpstream) -> PaymentForwarder:
    return PaymentForwarder(
        secret=SECRET,
        upstream_url=UPSTREAM_URL,
        transport=httpx.MockTransport(upstream),
    )


@pytest.fixture
def test_settings() -> CommonSettings:
    return CommonSettings(
        _env_file=None,
        environment="test",
        upstream_url=UPSTREAM_URL,
        upstream_secret_key=SECRET,
    )


@pytest.fixture
def client(test_settings: CommonSettings, forwarder: PaymentForwarder) -> TestClient:
    return TestClient(create_app(test_settings, forwarder=forwarder))
