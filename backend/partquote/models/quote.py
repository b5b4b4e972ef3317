from typing import List, Optional

from pydantic import BaseModel, Field

from partquote.models.part import Selections

NO_PRICEABLE_PARTS = "no_priceable_parts"
AWAITING_LOCATION = "awaiting_location"
READY = "ready"


class QuoteTotals(BaseModel):
    part_count: int = 0
    configured_count: int = 0
    subtotal: float = 0.0
    # None means "not yet computable", which is not the same as zero
    tax: Optional[float] = None
    shipping: Optional[float] = None
    total: float = 0.0
    zip_code: Optional[str] = None
    has_priceable_parts: bool = False
    status: str = NO_PRICEABLE_PARTS


class QuotedPart(BaseModel):
    id: str
    name: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    selections: Selections
    unit_price: float
    total_price: float
    estimated_ship_date: str


class QuoteSnapshot(BaseModel):
    quote_id: str
    parts: List[QuotedPart] = Field(default_factory=list)
    additional_requirements: List[str] = Field(default_factory=list)
    notes: str = ""
    subtotal: float = 0.0
    tax: Optional[float] = None
    shipping: Optional[float] = None
    total: float = 0.0
    status: str = NO_PRICEABLE_PARTS
