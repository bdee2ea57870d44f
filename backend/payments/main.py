import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from payments import errors
from payments.core.config import get_settings
from payments.middleware.body_size import BodySizeLimitMiddleware
from payments.schemas.checkout import CheckoutSessionResult, PaymentSessionRequest
from payments.schemas.events import WebhookEnvelope
from payments.services.broker import CeleryEventBroker, EventBroker
from payments.services.checkout import CheckoutSessionBuilder
from payments.services.stripe_processor import PaymentProcessor, StripeProcessor
from payments.services.webhooks import WebhookDispatcher

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Payments Service",
    description="Stripe checkout sessions and webhook translation",
    version="1.0.0",
)

app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)


# ---------- dependencies ----------
@lru_cache
def get_processor() -> PaymentProcessor:
    return StripeProcessor(
        api_key=settings.stripe_secret, tolerance=settings.webhook_tolerance
    )


@lru_cache
def get_broker() -> EventBroker:
    from payments.celery_app import celery

    return CeleryEventBroker(celery)


def get_session_builder(
    processor: PaymentProcessor = Depends(get_processor),
) -> CheckoutSessionBuilder:
    return CheckoutSessionBuilder(
        processor,
        success_url=settings.stripe_success_url,
        cancel_url=settings.stripe_cancel_url,
    )


def get_dispatcher(
    processor: PaymentProcessor = Depends(get_processor),
    broker: EventBroker = Depends(get_broker),
) -> WebhookDispatcher:
    return WebhookDispatcher(
        processor, broker, endpoint_secret=settings.stripe_endpoint_secret
    )


# ---------- health ----------
@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def health():
    return "Payments Webhook is up and running!!"


# ---------- checkout ----------
@app.post(
    "/payments/create-payment-session",
    response_model=CheckoutSessionResult,
    status_code=status.HTTP_201_CREATED,
)
def create_payment_session(
    data: PaymentSessionRequest,
    builder: CheckoutSessionBuilder = Depends(get_session_builder),
):
    try:
        return builder.build_session(data)
    except errors.ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except errors.ProcessorUnavailable:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Payment processor unavailable",
        )


@app.get("/payments/success")
def payment_success():
    return {"ok": True, "message": "Payment successful"}


@app.get("/payments/cancel")
def payment_cancel():
    return {"ok": False, "message": "Payment cancelled"}


# ---------- webhook ----------
@app.post("/payments/webhook")
async def stripe_webhook(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
):
    # Signature covers the exact bytes, so the body is not parsed here
    envelope = WebhookEnvelope(
        raw_body=await request.body(),
        signature_header=request.headers.get("stripe-signature"),
    )
    outcome = await run_in_threadpool(dispatcher.handle, envelope)
    return JSONResponse(status_code=outcome.status_code, content=outcome.content)
