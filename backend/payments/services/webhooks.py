import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from payments.errors import SignatureVerificationFailed
from payments.schemas.events import (
    CHARGE_SUCCEEDED,
    PAYMENT_SUCCEEDED,
    OutboundPaymentEvent,
    VerifiedEvent,
    WebhookEnvelope,
)
from payments.services.broker import EventBroker
from payments.services.stripe_processor import PaymentProcessor

logger = logging.getLogger(__name__)


@dataclass
class WebhookOutcome:
    status_code: int
    content: dict[str, Any] = field(default_factory=dict)


class WebhookDispatcher:
    """Verify a Stripe webhook, translate supported events and acknowledge.

    Any verified event is answered with 200, handled or not. Stripe
    redelivers on every non-2xx, so failures after verification (broker
    down, charge without orderId metadata) are logged here and never
    turned into an error status. Events lost to a broker failure are
    not retried.
    """

    def __init__(
        self, processor: PaymentProcessor, broker: EventBroker, endpoint_secret: str
    ):
        self.processor = processor
        self.broker = broker
        self.endpoint_secret = endpoint_secret
        self.handlers: dict[str, Callable[[VerifiedEvent], None]] = {
            CHARGE_SUCCEEDED: self._charge_succeeded,
        }

    def handle(self, envelope: WebhookEnvelope) -> WebhookOutcome:
        signature = envelope.signature_header
        try:
            if not signature:
                raise SignatureVerificationFailed("Missing stripe-signature header")
            event = self.processor.verify_event(
                envelope.raw_body, signature, self.endpoint_secret
            )
        except SignatureVerificationFailed as e:
            logger.warning(f"Rejected webhook: {e}")
            return WebhookOutcome(400, {"detail": f"Webhook Error: {e}"})

        logger.info(f"Received Stripe event {event.event_id} of type {event.kind}")

        handler = self.handlers.get(event.kind)
        if handler is None:
            logger.info(f"Event {event.kind} not handled")
        else:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Failed to process {event.kind} event {event.event_id}: {e}",
                    exc_info=True,
                )

        return WebhookOutcome(200, {"signature": signature})

    def _charge_succeeded(self, event: VerifiedEvent) -> None:
        charge = event.payload
        metadata = charge.get("metadata") or {}
        payment = OutboundPaymentEvent(
            stripe_payment_id=charge.get("id"),
            order_id=metadata.get("orderId"),
            receipt_url=charge.get("receipt_url"),
        )
        if payment.order_id is None:
            logger.warning(f"Charge {payment.stripe_payment_id} has no orderId metadata")
        self.broker.emit(PAYMENT_SUCCEEDED, payment.to_message())
