"""Structured logging for the fetcher, driven by Settings.

``configure_logging`` routes structlog and stdlib records through one
stdout handler: JSON lines when ENVIRONMENT is production, coloured console
output otherwise. ``network_context`` binds the network being fetched so
every event logged inside it (worker tasks included) carries it.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from rosetta_fetcher import config
from rosetta_fetcher.config import Settings
from rosetta_fetcher.models.identifiers import NetworkIdentifier

# Loggers that emit one record per HTTP request
TRANSPORT_LOGGERS = ("httpx", "httpcore", "asyncio")


class FetcherContext:
    """Processor stamping every event with the application name and environment."""

    def __init__(self, app_name: str, environment: str):
        self.app_name = app_name
        self.environment = environment

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", self.app_name)
        event_dict.setdefault("environment", self.environment)
        return event_dict


def network_context(network: NetworkIdentifier):
    """Bind ``blockchain`` and ``network`` to events logged inside the block."""
    return structlog.contextvars.bound_contextvars(
        blockchain=network.blockchain, network=network.network
    )


def is_production(settings: Settings) -> bool:
    return settings.ENVIRONMENT.lower() == "production"


def build_processors(settings: Settings) -> list[Processor]:
    """Processors shared by structlog loggers and foreign stdlib records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        FetcherContext(settings.APP_NAME, settings.ENVIRONMENT),
    ]
    if is_production(settings):
        processors.append(structlog.processors.format_exc_info)
    return processors


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog and the root logger from LOG_LEVEL, ENVIRONMENT and APP_NAME.

    Unknown LOG_LEVEL values fall back to INFO.
    """
    settings = settings or config.settings
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors = build_processors(settings)
    if is_production(settings):
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=processors)
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(level),
        server_url=settings.SERVER_URL,
    )
