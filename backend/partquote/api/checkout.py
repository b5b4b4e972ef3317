import json
import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException
from sqlmodel import select

from partquote.db.session import get_session
from partquote.models.checkout import CheckoutFormData
from partquote.models.records import OrderRecord
from partquote.services.store import aggregator, quote_sessions
from partquote.services.validation import CheckoutValidator

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/validate")
def validate_checkout(form: CheckoutFormData):
    return CheckoutValidator().validate(form)


@router.post("/{quote_id}/confirm")
def confirm_checkout(quote_id: str, form: CheckoutFormData,
                     idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key")):
    if idempotency_key:
        existing = _order_for_key(quote_id, idempotency_key)
        if existing is not None:
            logger.info("Replayed confirmation quote_id=%s order_id=%s", quote_id, existing["order_id"])
            return existing

    quote = quote_sessions.get(quote_id)
    if quote is None:
        raise HTTPException(status_code=404, detail="Quote not found")

    with quote.lock:
        snapshot = quote.snapshot(aggregator)
    priceable = len(snapshot.parts)

    validation = CheckoutValidator().validate(form, priceable_parts=priceable)
    logger.info("Checkout validation quote_id=%s => %s %s", quote_id, validation["decision"], validation["issues"])
    if validation["decision"] == "rejected":
        raise HTTPException(status_code=400, detail=validation["message"])

    ship_dates = sorted(p.estimated_ship_date for p in snapshot.parts)
    session = get_session()
    try:
        order = OrderRecord(
            id=_new_order_id(session),
            quote_id=quote_id,
            idempotency_key=idempotency_key or None,
            status="confirmed",
            payment_method=form.payment_method,
            total=snapshot.total,
            estimated_ship_date=ship_dates[-1] if ship_dates else None,
            snapshot=json.dumps(snapshot.model_dump()),
        )
        session.add(order)
        session.commit()
        session.refresh(order)
        logger.info("Order confirmed order_id=%s quote_id=%s total=%.2f", order.id, quote_id, order.total)
        result = _order_view(order)
    except Exception as e:
        logger.exception("Failed to record order for quote_id=%s: %s", quote_id, e)
        raise HTTPException(status_code=500, detail="Failed to process checkout")
    finally:
        session.close()

    # the order carries its own snapshot; the working session is done
    quote_sessions.discard(quote_id)
    return result


@router.get("/orders/{order_id}")
def get_order(order_id: str):
    session = get_session()
    try:
        order = session.get(OrderRecord, order_id)
        if order is None:
            raise HTTPException(status_code=404, detail="order not found")
        data = order.model_dump()
        data["snapshot"] = json.loads(order.snapshot)
        return data
    finally:
        session.close()


def _order_view(order: OrderRecord) -> Dict[str, Any]:
    return {
        "order_id": order.id,
        "quote_id": order.quote_id,
        "status": order.status,
        "total": order.total,
        "estimated_ship_date": order.estimated_ship_date,
        "created_at": order.created_at,
    }


def _order_for_key(quote_id: str, key: str) -> Optional[Dict[str, Any]]:
    session = get_session()
    try:
        order = session.exec(
            select(OrderRecord).where(OrderRecord.quote_id == quote_id, OrderRecord.idempotency_key == key)
        ).first()
        return _order_view(order) if order is not None else None
    finally:
        session.close()


def _new_order_id(session) -> str:
    order_id = f"ORD-{int(time.time() * 1000)}"
    base, suffix = order_id, 1
    while session.get(OrderRecord, order_id) is not None:
        order_id = f"{base}-{suffix}"
        suffix += 1
    return order_id
