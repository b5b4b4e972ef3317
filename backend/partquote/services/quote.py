import logging
import re
import time
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from partquote.models.part import Part
from partquote.models.quote import (
    AWAITING_LOCATION,
    NO_PRICEABLE_PARTS,
    READY,
    QuotedPart,
    QuoteSnapshot,
    QuoteTotals,
)
from partquote.services.configurator import is_complete
from partquote.services.pricing import PriceEngine

logger = logging.getLogger(__name__)

TAX_RATE = 0.0875
FLAT_SHIPPING_ESTIMATE = 25.0
ZIP_RE = re.compile(r"^\d{5}(-\d{4})?$")


def is_valid_zip(zip_code: Optional[str]) -> bool:
    return bool(zip_code) and ZIP_RE.match(zip_code.strip()) is not None


def new_quote_id() -> str:
    return f"QUOTE-{int(time.time() * 1000)}"


def complete_parts(parts: Iterable[Part]) -> List[Part]:
    return [p for p in parts if is_complete(p)]


def add_business_days(start: date, days: int) -> date:
    current = start
    remaining = days
    while remaining > 0:
        current += timedelta(days=1)
        if current.weekday() < 5:
            remaining -= 1
    return current


def estimated_ship_date(lead_time: str, start: Optional[date] = None) -> date:
    try:
        days = int(lead_time)
    except (TypeError, ValueError):
        days = 7
    return add_business_days(start or date.today(), days)


class QuoteAggregator:
    """Sums complete parts into subtotal, tax, shipping and total."""

    def __init__(self, engine: Optional[PriceEngine] = None,
                 tax_rate: float = TAX_RATE, shipping: float = FLAT_SHIPPING_ESTIMATE):
        self.engine = engine or PriceEngine()
        self.tax_rate = tax_rate
        self.shipping = shipping

    def totals(self, parts: Sequence[Part], zip_code: Optional[str] = None) -> QuoteTotals:
        priced = complete_parts(parts)
        subtotal = sum(self.engine.price(p) for p in priced)

        if not priced:
            return QuoteTotals(
                part_count=len(parts),
                configured_count=0,
                subtotal=0.0,
                total=0.0,
                zip_code=zip_code or None,
                has_priceable_parts=False,
                status=NO_PRICEABLE_PARTS,
            )

        if is_valid_zip(zip_code):
            tax = subtotal * self.tax_rate
            return QuoteTotals(
                part_count=len(parts),
                configured_count=len(priced),
                subtotal=subtotal,
                tax=tax,
                shipping=self.shipping,
                total=subtotal + tax + self.shipping,
                zip_code=zip_code.strip(),
                has_priceable_parts=True,
                status=READY,
            )

        return QuoteTotals(
            part_count=len(parts),
            configured_count=len(priced),
            subtotal=subtotal,
            total=subtotal,
            zip_code=zip_code or None,
            has_priceable_parts=True,
            status=AWAITING_LOCATION,
        )

    def snapshot(self, quote_id: str, parts: Sequence[Part], zip_code: Optional[str] = None,
                 requirements: Sequence[str] = (), notes: str = "",
                 order_date: Optional[date] = None) -> QuoteSnapshot:
        totals = self.totals(parts, zip_code)
        quoted = []
        for part in complete_parts(parts):
            total = self.engine.price(part)
            quoted.append(QuotedPart(
                id=part.id,
                name=part.name,
                file_name=part.file_name,
                file_size=part.file_size,
                selections=part.selections,
                unit_price=total / part.selections.quantity,
                total_price=total,
                estimated_ship_date=estimated_ship_date(part.selections.lead_time, order_date).isoformat(),
            ))
        logger.info("Built snapshot quote_id=%s parts=%s status=%s", quote_id, len(quoted), totals.status)
        return QuoteSnapshot(
            quote_id=quote_id,
            parts=quoted,
            additional_requirements=list(requirements),
            notes=notes,
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            total=totals.total,
            status=totals.status,
        )


def summarize(parts: Sequence[Part], zip_code: Optional[str] = None) -> QuoteTotals:
    return QuoteAggregator().totals(parts, zip_code)
