from __future__ import annotations

import logging
import sys

import structlog
import uvicorn

from unifi_relay.app import create_app
from unifi_relay.errors import ConfigError
from unifi_relay.settings import RelaySettings


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(str(level or "INFO").upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str = "INFO") -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main() -> None:
    settings = RelaySettings()
    configure_logging(settings.log_level)
    logger = structlog.get_logger("unifi-relay")
    try:
        settings.require()
    except ConfigError as e:
        logger.error("Refusing to start", error=str(e))
        sys.exit(2)

    app = create_app(settings)
    logger.info("Relay listening", host=settings.host, port=settings.port)
    uvicorn_level = logging.getLevelName(_resolve_level(settings.log_level)).lower()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=uvicorn_level)


if __name__ == "__main__":
    main()
