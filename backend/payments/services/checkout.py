import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from payments.errors import ValidationError
from payments.schemas.checkout import CheckoutSessionResult, PaymentSessionRequest
from payments.services.stripe_processor import PaymentProcessor

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_UNIT = 100

# Largest unit_amount Stripe accepts
MAX_UNIT_AMOUNT = 99_999_999


def to_minor_units(price: Decimal | int | float | str) -> int:
    """Convert a currency amount to Stripe's integer minor units, rounding half up."""
    try:
        amount = Decimal(str(price)) * MINOR_UNITS_PER_UNIT
        minor = int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid price: {price!r}") from e
    if minor > MAX_UNIT_AMOUNT:
        raise ValidationError(f"Price {price!r} exceeds the maximum unit amount")
    return minor


def from_minor_units(amount: int) -> Decimal:
    return Decimal(amount) / MINOR_UNITS_PER_UNIT


class CheckoutSessionBuilder:
    def __init__(self, processor: PaymentProcessor, success_url: str, cancel_url: str):
        self.processor = processor
        self.success_url = success_url
        self.cancel_url = cancel_url

    def build_session(self, request: PaymentSessionRequest) -> CheckoutSessionResult:
        currency = self._validate(request)

        line_items = [
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": item.name},
                    "unit_amount": to_minor_units(item.price),
                },
                "quantity": item.quantity,
            }
            for item in request.items
        ]

        # orderId round-trips through Stripe into the charge webhook
        session = self.processor.create_session(
            currency=currency,
            line_items=line_items,
            metadata={"orderId": request.order_id},
            success_url=self.success_url,
            cancel_url=self.cancel_url,
        )
        logger.info(
            f"Created checkout session for order {request.order_id} "
            f"with {len(line_items)} line item(s)"
        )

        return CheckoutSessionResult(
            url=getattr(session, "url", None),
            success_url=getattr(session, "success_url", None) or self.success_url,
            cancel_url=getattr(session, "cancel_url", None) or self.cancel_url,
        )

    @staticmethod
    def _validate(request: PaymentSessionRequest) -> str:
        currency = (request.currency or "").strip().lower()
        if not currency:
            raise ValidationError("Currency code is required")
        if not request.items:
            raise ValidationError("At least one item is required")
        for item in request.items:
            if item.price is None or Decimal(str(item.price)) <= 0:
                raise ValidationError(f"Item {item.name!r} must have a positive price")
            if not isinstance(item.quantity, int) or item.quantity < 1:
                raise ValidationError(f"Item {item.name!r} must have quantity >= 1")
        return currency
