from celery import Celery

from payments.core.config import get_settings
from payments.schemas.events import PAYMENT_SUCCEEDED

settings = get_settings()

celery = Celery("payments", broker=settings.broker_url)

# Publish-only: consumers live in the fulfillment services
celery.conf.task_ignore_result = True

celery.conf.task_routes = {PAYMENT_SUCCEEDED: {"queue": settings.payments_queue}}
