"""
Container entrypoint for the Property Lifecycle Engine.

Binds to 0.0.0.0:$PORT.
"""

import logging
import os

import uvicorn

from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    configure_logging()
    port = int(os.getenv("PORT", "8000"))
    logger.info("Starting Property Lifecycle Engine on port %d", port)

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port)
