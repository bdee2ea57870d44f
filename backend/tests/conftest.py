import hashlib
import hmac
import json
import os
import time
from types import SimpleNamespace
from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient

# Set test environment variables
os.environ.update(
    {
        "STRIPE_SECRET": "sk_test_123",
        "STRIPE_ENDPOINT_SECRET": "whsec_test",
        "STRIPE_SUCCESS_URL": "http://localhost:3000/payments/success",
        "STRIPE_CANCEL_URL": "http://localhost:3000/payments/cancel",
        "BROKER_URL": "memory://",
    }
)

from payments.core.config import Settings, get_settings
from payments.errors import SignatureVerificationFailed
from payments.main import app, get_broker, get_processor
from payments.schemas.events import VerifiedEvent
from payments.services.stripe_processor import StripeProcessor


def stripe_header(body: bytes, secret: str, timestamp: int | None = None) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    payload = f"{ts}.{body.decode()}".encode("utf-8")
    sig = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"


def stripe_event_body(event_type: str, obj: dict[str, Any]) -> bytes:
    return json.dumps(
        {"id": "evt_001", "object": "event", "type": event_type, "data": {"object": obj}}
    ).encode()


class FakeProcessor:
    """In-memory stand-in for Stripe."""

    def __init__(self):
        self.sessions: list[dict[str, Any]] = []
        self.session_error: Exception | None = None
        self.next_event: VerifiedEvent | None = None
        self.reject_with: str | None = None
        self.verify_calls = 0

    def create_session(self, currency, line_items, metadata, success_url, cancel_url):
        if self.session_error is not None:
            raise self.session_error
        self.sessions.append(
            {
                "currency": currency,
                "line_items": line_items,
                "metadata": metadata,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )
        return SimpleNamespace(
            id="cs_test_1",
            url="https://checkout.stripe.com/c/pay/cs_test_1",
            success_url=success_url,
            cancel_url=cancel_url,
        )

    def verify_event(self, raw_body, signature_header, secret):
        self.verify_calls += 1
        if self.reject_with is not None:
            raise SignatureVerificationFailed(self.reject_with)
        return self.next_event


class RecordingBroker:
    def __init__(self):
        self.messages: list[tuple[str, dict[str, Any]]] = []
        self.error: Exception | None = None

    def emit(self, topic, payload):
        if self.error is not None:
            raise self.error
        self.messages.append((topic, payload))


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def processor() -> FakeProcessor:
    return FakeProcessor()


@pytest.fixture
def broker() -> RecordingBroker:
    return RecordingBroker()


@pytest.fixture
def client(processor, broker) -> Iterator[TestClient]:
    """Test client wired to the fake processor and broker."""
    app.dependency_overrides[get_processor] = lambda: processor
    app.dependency_overrides[get_broker] = lambda: broker
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def stripe_client(broker, settings) -> Iterator[TestClient]:
    """Test client that verifies signatures with the real Stripe SDK."""
    app.dependency_overrides[get_processor] = lambda: StripeProcessor(
        api_key=settings.stripe_secret, tolerance=settings.webhook_tolerance
    )
    app.dependency_overrides[get_broker] = lambda: broker
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
