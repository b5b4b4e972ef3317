from typing import Any, Dict, List, Optional

from partquote.models.checkout import CheckoutFormData
from partquote.services.quote import is_valid_zip

ALLOWED_ATTACHMENT_TYPES = {
    "image/png",
    "image/jpeg",
    "application/pdf",
    "image/svg+xml",
    "application/dxf",
}
MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024

# issue -> message shown to the buyer
ISSUE_MESSAGES = {
    "missing_shipping_info": "Missing required shipping information",
    "missing_credit_card": "Missing credit card information",
    "missing_po_number": "Missing purchase order number",
    "missing_billing_info": "Missing required billing information",
    "no_priceable_parts": "Quote has no fully configured parts",
    "invalid_attachment_type": "Invalid file type. Allowed: PNG, JPG, PDF, SVG, DXF",
    "attachment_too_large": "File size exceeds 10 MB limit",
}


class CheckoutValidator:
    """Validation logic for checkout submissions.

    Rules:
    - shipping name and street address are required -> rejected
    - credit_card payment without card details -> rejected
    - purchase_order payment without a PO number -> rejected
    - separate billing address without name/address -> rejected
    - shipping ZIP that is not 5-digit or ZIP+4 -> warning only

    Issues are returned sorted; the first blocking issue in ``BLOCKING``
    is the one reported back to the buyer.
    """

    BLOCKING = (
        "missing_shipping_info",
        "missing_credit_card",
        "missing_po_number",
        "missing_billing_info",
        "no_priceable_parts",
    )

    def _add_issue(self, issues: List[str], issue: str) -> None:
        if issue not in issues:
            issues.append(issue)

    def validate(self, form: CheckoutFormData, priceable_parts: Optional[int] = None) -> Dict[str, Any]:
        issues: List[str] = []

        ship = form.shipping_info
        if ship is None or not ship.full_name.strip() or not ship.address.strip():
            self._add_issue(issues, "missing_shipping_info")
        elif ship.zip_code and not is_valid_zip(ship.zip_code):
            self._add_issue(issues, "zip_unverified")

        if form.payment_method == "credit_card" and form.credit_card_info is None:
            self._add_issue(issues, "missing_credit_card")

        if form.payment_method == "purchase_order":
            po = form.purchase_order_info
            if po is None or not po.po_number.strip():
                self._add_issue(issues, "missing_po_number")

        billing = form.billing_info
        if not billing.same_as_shipping and not (billing.full_name and billing.address):
            self._add_issue(issues, "missing_billing_info")

        if priceable_parts is not None and priceable_parts == 0:
            self._add_issue(issues, "no_priceable_parts")

        blocking = [i for i in self.BLOCKING if i in issues]
        decision = "rejected" if blocking else "accepted"
        message = ISSUE_MESSAGES[blocking[0]] if blocking else None

        return {"decision": decision, "issues": sorted(issues), "message": message}


def validate_attachment(content_type: Optional[str], size: int) -> Optional[str]:
    """Return the rejection issue for an uploaded 2D file, or None when acceptable."""
    if content_type not in ALLOWED_ATTACHMENT_TYPES:
        return "invalid_attachment_type"
    if size > MAX_ATTACHMENT_BYTES:
        return "attachment_too_large"
    return None
