from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Stripe event type that carries a completed charge
CHARGE_SUCCEEDED = "charge.succeeded"

# Broker topic consumed by order fulfillment
PAYMENT_SUCCEEDED = "payment.succeeded"


@dataclass(frozen=True)
class WebhookEnvelope:
    raw_body: bytes
    signature_header: str | None


class StripeEventData(BaseModel):
    object: dict[str, Any]


class StripeEvent(BaseModel):
    """Decoded Stripe webhook body. Only built after the signature checks out."""

    id: str | None = Field(None, description="Stripe event ID")
    type: str = Field(..., description="Stripe event type")
    data: StripeEventData


class VerifiedEvent(BaseModel):
    kind: str
    payload: dict[str, Any]
    event_id: str | None = None


class OutboundPaymentEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    stripe_payment_id: str = Field(..., alias="stripePaymentId")
    order_id: str | None = Field(None, alias="orderId")
    receipt_url: str | None = Field(None, alias="receiptUrl")

    def to_message(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
