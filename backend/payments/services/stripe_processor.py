import logging
from typing import Any, Protocol

import stripe
from pydantic import ValidationError

from payments.errors import ProcessorUnavailable, SignatureVerificationFailed
from payments.schemas.events import StripeEvent, VerifiedEvent

logger = logging.getLogger(__name__)


class PaymentProcessor(Protocol):
    def create_session(
        self,
        currency: str,
        line_items: list[dict[str, Any]],
        metadata: dict[str, Any],
        success_url: str,
        cancel_url: str,
    ) -> Any:
        ...

    def verify_event(
        self, raw_body: bytes, signature_header: str, secret: str
    ) -> VerifiedEvent:
        ...


class StripeProcessor:
    """Stripe-backed checkout sessions and webhook verification.

    Holds its own API key and passes it on every request, so several
    instances with different credentials can live in one process.
    """

    def __init__(self, api_key: str, tolerance: int = 300):
        self.api_key = api_key
        self.tolerance = tolerance

    def create_session(
        self,
        currency: str,
        line_items: list[dict[str, Any]],
        metadata: dict[str, Any],
        success_url: str,
        cancel_url: str,
    ) -> stripe.checkout.Session:
        try:
            return stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                line_items=line_items,
                # Stripe copies payment intent metadata onto the charge
                payment_intent_data={"metadata": metadata},
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe session creation failed ({currency}): {e}")
            raise ProcessorUnavailable(str(e)) from e

    def verify_event(
        self, raw_body: bytes, signature_header: str, secret: str
    ) -> VerifiedEvent:
        """
        Raise SignatureVerificationFailed if the body was not signed by Stripe.
        """
        try:
            payload = raw_body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SignatureVerificationFailed("Body is not valid UTF-8") from e

        try:
            stripe.WebhookSignature.verify_header(
                payload, signature_header, secret, tolerance=self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            raise SignatureVerificationFailed(str(e)) from e

        try:
            event = StripeEvent.model_validate_json(raw_body)
        except ValidationError as ve:
            raise SignatureVerificationFailed(
                f"Invalid payload: {ve.error_count()} validation error(s)"
            ) from ve

        return VerifiedEvent(kind=event.type, payload=event.data.object, event_id=event.id)
