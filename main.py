# main.py
"""
🚀 ENTRY POINT

Starts the HTTP service: landing page, shop-info API and the Telegram
webhook, all in one FastAPI app served by uvicorn.

    python main.py
    uvicorn main:app
"""

import structlog
import uvicorn

from app.api.app import create_app
from config.settings import config
from infrastructure.logger import setup_logging

setup_logging(config)
logger = structlog.get_logger()

app = create_app(config)


if __name__ == "__main__":
    logger.info(
        "api_starting",
        host=config.api_host,
        port=config.api_port,
        environment=config.environment,
    )
    uvicorn.run(
        app,
        host=config.api_host,
        port=config.api_port,
        log_level="info",
        access_log=True,
    )
