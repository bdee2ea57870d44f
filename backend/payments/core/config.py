from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    stripe_secret: str
    stripe_endpoint_secret: str
    stripe_success_url: str
    stripe_cancel_url: str
    broker_url: str = "redis://localhost:6379/0"
    payments_queue: str = "payments"
    port: int = 3000
    webhook_tolerance: int = 300  # seconds
    max_body_bytes: int = 1_048_576  # 1 MiB
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
