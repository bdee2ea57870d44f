from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PaymentSessionItem(BaseModel, extra="forbid", frozen=True):
    name: str = Field(..., min_length=1, description="Product name shown on checkout")
    price: Decimal = Field(..., gt=0, description="Unit price in currency units")
    quantity: int = Field(..., ge=1)


class PaymentSessionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    order_id: str = Field(..., alias="orderId", description="Internal order identifier")
    currency: str = Field(..., min_length=1, description="ISO currency code")
    items: list[PaymentSessionItem] = Field(..., min_length=1)


class CheckoutSessionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str | None = None
    success_url: str = Field(..., alias="successUrl")
    cancel_url: str = Field(..., alias="cancelUrl")
