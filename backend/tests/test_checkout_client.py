import requests

from partquote.models.checkout import CheckoutFormData, ShippingInfo
from partquote.models.quote import QuoteSnapshot
from partquote.services import checkout_client
from partquote.services.checkout_client import CheckoutClient, default_address


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body if body is not None else {}

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


SNAPSHOT = QuoteSnapshot(quote_id="QUOTE-1", subtotal=126.0, total=126.0)
FORM = CheckoutFormData(shipping_info=ShippingInfo(full_name="Jane", address="1 Main St"))


def _client():
    return CheckoutClient(base_url="http://quotes.test/", max_retries=3, backoff=0)


def test_submit_posts_to_confirm_endpoint(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None, headers=None):
        calls.append((url, headers))
        return FakeResponse(200, {"order_id": "ORD-1", "status": "confirmed"})

    monkeypatch.setattr(checkout_client.requests, "post", fake_post)
    result = _client().submit(SNAPSHOT, FORM)

    assert result.ok
    assert result.data["order_id"] == "ORD-1"
    assert calls[0][0] == "http://quotes.test/checkout/QUOTE-1/confirm"
    assert calls[0][1]["Idempotency-Key"] == "quote-QUOTE-1"


def test_submit_retries_network_errors(monkeypatch):
    attempts = []

    def flaky_post(url, **kwargs):
        attempts.append(url)
        if len(attempts) < 3:
            raise requests.ConnectionError("down")
        return FakeResponse(200, {"order_id": "ORD-2"})

    monkeypatch.setattr(checkout_client.requests, "post", flaky_post)
    result = _client().submit(SNAPSHOT, FORM)

    assert result.ok
    assert len(attempts) == 3


def test_submit_gives_up_with_message(monkeypatch):
    monkeypatch.setattr(checkout_client.requests, "post", lambda url, **kw: FakeResponse(503))
    result = _client().submit(SNAPSHOT, FORM)

    assert not result.ok
    assert result.error == "Failed to submit order. Please try again."


def test_validation_rejection_is_not_retried(monkeypatch):
    attempts = []

    def reject(url, **kwargs):
        attempts.append(url)
        return FakeResponse(400, {"detail": "Missing credit card information"})

    monkeypatch.setattr(checkout_client.requests, "post", reject)
    result = _client().submit(SNAPSHOT, FORM)

    assert result.error == "Missing credit card information"
    assert len(attempts) == 1


def test_fetch_saved_addresses(monkeypatch):
    body = {"success": True, "addresses": [
        {"id": "addr_1", "type": "shipping", "is_default": False},
        {"id": "addr_2", "type": "shipping", "is_default": True},
    ]}
    monkeypatch.setattr(checkout_client.requests, "get", lambda url, timeout=None: FakeResponse(200, body))
    result = _client().fetch_saved_addresses()

    assert result.ok
    assert default_address(result.data["addresses"])["id"] == "addr_2"
    assert default_address(result.data["addresses"], "billing") is None


def test_fetch_saved_addresses_failure(monkeypatch):
    def boom(url, timeout=None):
        raise requests.Timeout("slow")

    monkeypatch.setattr(checkout_client.requests, "get", boom)
    result = _client().fetch_saved_addresses()
    assert result == (False, None, "Failed to fetch addresses")
