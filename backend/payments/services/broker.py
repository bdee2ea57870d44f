import logging
from typing import Any, Protocol

from celery import Celery

logger = logging.getLogger(__name__)


class EventBroker(Protocol):
    def emit(self, topic: str, payload: dict[str, Any]) -> None:
        ...


class CeleryEventBroker:
    """Fire-and-forget publisher over the Celery broker connection."""

    def __init__(self, app: Celery):
        self.app = app

    def emit(self, topic: str, payload: dict[str, Any]) -> None:
        result = self.app.send_task(topic, args=[payload])
        logger.info(f"Emitted {topic} as message {result.id}")
