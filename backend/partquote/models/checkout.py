from typing import Literal, Optional

from pydantic import BaseModel, Field


class ShippingInfo(BaseModel):
    full_name: str = ""
    company: Optional[str] = None
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "United States"
    phone: str = ""
    email: str = ""


class BillingInfo(BaseModel):
    same_as_shipping: bool = True
    full_name: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class CreditCardInfo(BaseModel):
    card_number: str
    expiry_date: str
    cvv: str
    cardholder_name: str


class PurchaseOrderInfo(BaseModel):
    po_number: str = ""
    notes: Optional[str] = None


class CheckoutFormData(BaseModel):
    shipping_info: Optional[ShippingInfo] = None
    billing_info: BillingInfo = Field(default_factory=BillingInfo)
    credit_card_info: Optional[CreditCardInfo] = None
    purchase_order_info: Optional[PurchaseOrderInfo] = None
    payment_method: Literal["credit_card", "purchase_order"] = "credit_card"


class AddressPayload(BaseModel):
    type: Literal["shipping", "billing"] = "shipping"
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


class Attachment(BaseModel):
    id: str
    part_id: str
    file_name: str
    file_size: int
    file_type: str
    uploaded_at: str
    url: str
