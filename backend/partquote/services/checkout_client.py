import logging
import os
import time
from typing import Any, Dict, List, NamedTuple, Optional

import requests

from partquote.models.checkout import CheckoutFormData
from partquote.models.quote import QuoteSnapshot

logger = logging.getLogger(__name__)

DEFAULT_CHECKOUT_API = os.getenv("CHECKOUT_API_URL", "http://localhost:8000")


class SubmitResult(NamedTuple):
    ok: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class CheckoutClient:
    """Posts a priced quote snapshot to the order-confirmation endpoint.

    Network failures never touch part state; they come back as a
    ``SubmitResult`` carrying a message the UI can show and dismiss.
    """

    def __init__(self, base_url: str = None, max_retries: int = 3, timeout: float = 5,
                 backoff: float = 0.5):
        self.base_url = (base_url or DEFAULT_CHECKOUT_API).rstrip("/")
        self.max_retries = max_retries
        self.timeout = timeout
        self.backoff = backoff
        logger.debug("CheckoutClient initialized with base_url=%s max_retries=%s", self.base_url, self.max_retries)

    def submit(self, snapshot: QuoteSnapshot, form: CheckoutFormData) -> SubmitResult:
        url = f"{self.base_url}/checkout/{snapshot.quote_id}/confirm"
        # idempotency key avoids duplicate orders when a retry follows a lost response
        headers = {"Content-Type": "application/json", "Idempotency-Key": f"quote-{snapshot.quote_id}"}
        payload = form.model_dump()

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("Submitting checkout attempt=%s url=%s", attempt, url)
                resp = requests.post(url, json=payload, timeout=self.timeout, headers=headers)
            except requests.RequestException as e:
                logger.warning("Attempt %s url=%s: checkout submission failed: %s", attempt, url, e)
            else:
                if resp.status_code == 400:
                    # validation errors will not change on retry
                    detail = _detail(resp) or "Checkout was rejected"
                    logger.warning("Checkout rejected quote_id=%s: %s", snapshot.quote_id, detail)
                    return SubmitResult(False, error=detail)
                try:
                    resp.raise_for_status()
                except requests.HTTPError as e:
                    logger.warning("Attempt %s url=%s: checkout submission failed: %s", attempt, url, e)
                else:
                    logger.info("Checkout submitted quote_id=%s status=%s", snapshot.quote_id, resp.status_code)
                    return SubmitResult(True, data=resp.json())
            if attempt < self.max_retries:
                time.sleep(self.backoff * attempt)

        logger.error("All %s checkout attempts failed for quote_id=%s", self.max_retries, snapshot.quote_id)
        return SubmitResult(False, error="Failed to submit order. Please try again.")

    def fetch_saved_addresses(self) -> SubmitResult:
        url = f"{self.base_url}/user/addresses"
        try:
            resp = requests.get(url, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Failed to load saved addresses from %s: %s", url, e)
            return SubmitResult(False, error="Failed to fetch addresses")
        addresses: List[Dict[str, Any]] = body.get("addresses", [])
        return SubmitResult(True, data={"addresses": addresses})


def default_address(addresses: List[Dict[str, Any]], kind: str = "shipping") -> Optional[Dict[str, Any]]:
    """The saved address used to pre-fill a checkout form section."""
    for addr in addresses:
        if addr.get("type") == kind and addr.get("is_default"):
            return addr
    return None


def _detail(resp) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("detail") or body.get("error")
    return None
