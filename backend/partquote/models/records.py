from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SavedAddress(SQLModel, table=True):
    id: str = Field(primary_key=True)
    type: str = "shipping"
    full_name: str
    company: Optional[str] = None
    address: str
    city: str
    state: str
    zip_code: str
    country: str = "United States"
    phone: Optional[str] = None
    email: Optional[str] = None
    is_default: bool = False
    created_at: str = Field(default_factory=_now)
    updated_at: str = Field(default_factory=_now)


class OrderRecord(SQLModel, table=True):
    id: str = Field(primary_key=True)
    quote_id: str = Field(index=True)
    # Idempotency-Key header of the confirming request, if any
    idempotency_key: Optional[str] = Field(default=None, index=True)
    status: str = "confirmed"
    payment_method: str
    total: float
    estimated_ship_date: Optional[str] = None
    # JSON snapshot of the priced parts and totals at confirmation time
    snapshot: str
    created_at: str = Field(default_factory=_now)
