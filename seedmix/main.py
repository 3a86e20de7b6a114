"""
SeedMix Main Application

Entry point that serves the FastAPI backend with uvicorn.
"""

import structlog
import uvicorn

from .api.backend import create_app
from .models.config_models import SystemConfig

logger = structlog.get_logger(__name__)


def main():
    """Main entry point for the application."""
    config = SystemConfig.from_env()
    app = create_app(config)

    logger.info("Starting SeedMix", host=config.host, port=config.port)

    try:
        uvicorn.run(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower()
        )
    except KeyboardInterrupt:
        logger.info("Application stopped by user")


if __name__ == "__main__":
    main()
