#!/usr/bin/env python3
"""
Run the Property Lifecycle Engine web server locally.
"""

import logging

import uvicorn

from utils.config import Config
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main():
    """Start the web server."""
    config = Config.load()
    configure_logging(config)

    logger.info("Starting Property Lifecycle Engine on http://%s:%d", config.host, config.port)

    uvicorn.run(
        "web.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
