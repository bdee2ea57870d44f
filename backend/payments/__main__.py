import logging

import uvicorn

from payments.core.config import get_settings

logger = logging.getLogger("payments")


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Payments service running on port {settings.port}")
    uvicorn.run("payments.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
