"""Entry point for the contact index server."""

import asyncio
import contextlib
import sys

import structlog
import uvicorn

from contact_index.app import create_app
from contact_index.config import Settings
from contact_index.logging import configure_logging

logger = structlog.get_logger()


async def serve(settings: Settings) -> None:
    """Run uvicorn until it receives SIGINT or SIGTERM.

    Args:
        settings: Server configuration.
    """
    app = create_app(settings)

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
        timeout_graceful_shutdown=int(settings.shutdown_timeout),
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Entry point for python -m contact_index."""
    settings = Settings()
    configure_logging(debug=settings.debug, json_logs=settings.json_logs)
    logger.info("contact_index_starting", data_path=str(settings.data_path))

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(serve(settings))

    sys.exit(0)


if __name__ == "__main__":
    main()
