#!/usr/bin/env python3
"""Startup script for the Receipegram Backend Service"""

import sys
import logging
import uvicorn

from core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def start_server():
    """Start the FastAPI server with uvicorn"""
    host = settings.HOST
    port = settings.PORT

    logger.info(f"Starting {settings.APP_NAME} Backend Service")
    logger.info(f"Port: {port}")
    logger.info(f"Host: {host}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        # Import the app here to catch any import errors
        from main import app
        logger.info("Successfully imported FastAPI app")

        config = uvicorn.Config(
            app=app,
            host=host,
            port=port,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=settings.is_development,
            use_colors=False,
            server_header=False,  # Don't expose server info
            timeout_keep_alive=5,
            loop="auto"
        )

        server = uvicorn.Server(config)
        logger.info(f"Server configured, starting on {host}:{port}")
        server.run()

    except ImportError as e:
        logger.error(f"Failed to import app: {e}")
        logger.error("Make sure main.py exists and has 'app' variable")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    start_server()
