import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from sqlmodel import select

from partquote.db.session import get_session
from partquote.models.checkout import AddressPayload
from partquote.models.records import SavedAddress

logger = logging.getLogger(__name__)
router = APIRouter()


def _new_address_id(session) -> str:
    address_id = f"addr_{int(time.time() * 1000)}"
    base, suffix = address_id, 1
    while session.get(SavedAddress, address_id) is not None:
        address_id = f"{base}_{suffix}"
        suffix += 1
    return address_id


@router.get("")
def list_addresses():
    session = get_session()
    try:
        rows = session.exec(select(SavedAddress).order_by(SavedAddress.created_at)).all()
        return {"success": True, "addresses": [r.model_dump() for r in rows]}
    except Exception as e:
        logger.exception("Error fetching addresses: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch addresses")
    finally:
        session.close()


@router.post("")
def create_address(payload: AddressPayload):
    session = get_session()
    try:
        if payload.is_default:
            _clear_default(session, payload.type)
        address = SavedAddress(id=_new_address_id(session), **payload.model_dump())
        session.add(address)
        session.commit()
        session.refresh(address)
        logger.info("Created address id=%s type=%s", address.id, address.type)
        return {"success": True, "address": address.model_dump()}
    finally:
        session.close()


@router.put("/{address_id}")
def update_address(address_id: str, payload: AddressPayload):
    session = get_session()
    try:
        address = session.get(SavedAddress, address_id)
        if address is None:
            raise HTTPException(status_code=404, detail="Address not found")
        if payload.is_default:
            _clear_default(session, payload.type)
        for key, value in payload.model_dump().items():
            setattr(address, key, value)
        address.updated_at = datetime.now(timezone.utc).isoformat()
        session.add(address)
        session.commit()
        session.refresh(address)
        logger.info("Updated address id=%s", address_id)
        return {"success": True, "address": address.model_dump()}
    finally:
        session.close()


@router.delete("/{address_id}")
def delete_address(address_id: str):
    session = get_session()
    try:
        address = session.get(SavedAddress, address_id)
        if address is None:
            raise HTTPException(status_code=404, detail="Address not found")
        session.delete(address)
        session.commit()
        logger.info("Deleted address id=%s", address_id)
        return {"success": True, "message": "Address deleted successfully"}
    finally:
        session.close()


def _clear_default(session, kind: str) -> None:
    # one default address per type
    for addr in session.exec(select(SavedAddress).where(SavedAddress.type == kind, SavedAddress.is_default == True)).all():  # noqa: E712
        addr.is_default = False
        session.add(addr)
