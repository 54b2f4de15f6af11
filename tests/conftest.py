"""Pytest fixtures for Kount adapter tests."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from kount_risk.config import Settings
from kount_risk.core.base_models import Environment, KountCredentials
from kount_risk.core.token_cache import InMemoryTokenCache

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock shared by the cache, authenticator and builder."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class KountStub:
    """
    In-process stand-in for the Kount token and orders endpoints.

    Queued responses are served first; after that the token endpoint issues
    token-1, token-2, ... and the orders endpoint answers with an APPROVE.
    """

    def __init__(self):
        self.token_responses: list = []
        self.order_responses: list = []
        self.token_requests: list[httpx.Request] = []
        self.order_requests: list[httpx.Request] = []
        self.issued_tokens = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/v1/token"):
            self.token_requests.append(request)
            queued = self._next(self.token_responses, request)
            return queued if queued is not None else self._issue_token()

        if request.url.path.endswith("/orders"):
            self.order_requests.append(request)
            queued = self._next(self.order_responses, request)
            return queued if queued is not None else httpx.Response(201, json=approve_body())

        return httpx.Response(404, text="not found")

    def _next(self, queue: list, request: httpx.Request) -> httpx.Response | None:
        if not queue:
            return None
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item

    def _issue_token(self) -> httpx.Response:
        self.issued_tokens += 1
        return httpx.Response(
            200,
            json={
                "token_type": "Bearer",
                "access_token": f"token-{self.issued_tokens}",
                "expires_in": 1200,
                "scope": "k1_integration_api",
            },
        )

    def bearer_tokens_seen(self) -> list[str]:
        return [r.headers["Authorization"].removeprefix("Bearer ") for r in self.order_requests]


def approve_body(order_id: str = "kount-order-1", merchant_order_id: str = "O1") -> dict:
    """A nested v2 orders response with an APPROVE verdict."""
    return {
        "version": "v2",
        "order": {
            "orderId": order_id,
            "merchantOrderId": merchant_order_id,
            "channel": "WEB",
            "transactions": [{"transactionId": "txn-1", "merchantTransactionId": merchant_order_id}],
            "riskInquiry": {
                "decision": "APPROVE",
                "omniscore": 950,
                "persona": {"uniqueCards": 1, "uniqueDevices": 1},
                "reasonCode": "LOW_RISK",
            },
        },
    }


@pytest.fixture
def approve_response_body() -> dict:
    return approve_body()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, api_key="dGVzdDpzZWNyZXQ=", environment=Environment.SANDBOX)


@pytest.fixture
def credentials() -> KountCredentials:
    return KountCredentials(api_key="dGVzdDpzZWNyZXQ=", environment=Environment.SANDBOX)


@pytest.fixture
def token_cache(clock) -> InMemoryTokenCache:
    return InMemoryTokenCache(clock=clock)


@pytest.fixture
def kount_stub() -> KountStub:
    return KountStub()


@pytest.fixture
def http_client(kount_stub) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(kount_stub.handler))


@pytest.fixture
def minimal_order() -> dict:
    """Only the required fields."""
    return {
        "order_id": "O1",
        "session_id": "S1",
        "total_amount": 10.0,
        "currency": "USD",
        "created_at": "2026-01-15T11:30:00Z",
        "channel": "WEB",
        "payment": {"type": "CARD"},
        "customer": {"ip_address": "1.2.3.4"},
    }


@pytest.fixture
def full_order(minimal_order) -> dict:
    """An order using every optional block."""
    return {
        **minimal_order,
        "merchant_category_code": "5999",
        "customer": {
            "id": "cus_123",
            "email": "jane@example.com",
            "first_name": "Jane",
            "last_name": "Doe",
            "phone": "+15555550100",
            "ip_address": "1.2.3.4",
            "account_created_at": "2024-03-01T08:00:00Z",
        },
        "payment": {"type": "CARD", "token": "tok_abc", "bin": "411111", "last4": "1111", "brand": "VISA"},
        "items": [
            {
                "sku": "SKU-1",
                "name": "Green tea",
                "description": "Loose leaf, 100g",
                "quantity": "2",
                "price": "4.5",
                "category": "grocery",
                "is_digital": False,
                "physical_attributes": {"weight": "100g", "color": None},
            },
            {"name": "Gift card", "quantity": 1, "price": 1.0, "is_digital": True},
        ],
        "shipping_address": {
            "address1": "1 Main St",
            "city": "Boise",
            "region": "ID",
            "postal_code": "83702",
            "country": "US",
        },
        "shipping": {"amount": 5.0, "provider": "UPS", "method": "STANDARD"},
        "billing_address": {"address1": "9 Side St", "city": "Boise", "country": "US"},
        "processor": "STRIPE",
        "transaction_status": "AUTHORIZED",
        "authorization_status": {
            "auth_result": "APPROVED",
            "date_time": "2026-01-15T11:31:00Z",
            "verification_response": {"cvv_status": "MATCH", "avs_status": "A"},
        },
        "tax": {"is_taxable": True, "tax_amount": 0.8},
        "promotions": [{"id": "PROMO10", "discount": {"percentage": 10.0}}],
        "loyalty": {"id": "LOY-1", "credit": {"credit_type": "POINTS", "amount": 50}},
        "custom_fields": {"giftWrap": True, "note": ""},
    }
