"""structlog setup. JSON lines via orjson outside development, colored console otherwise."""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import orjson
import structlog
from structlog.types import Processor

from naijatax.config import get_settings


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    return orjson.dumps(obj).decode("utf-8")


def _use_json(log_format: str | None, environment: str) -> bool:
    if log_format:
        return log_format.lower() == "json"
    return environment != "development"


def configure_logging() -> None:
    settings = get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if _use_json(settings.LOG_FORMAT, settings.ENVIRONMENT):
        processors += [
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


@contextmanager
def rule_context(rule_version: str, **fields: Any) -> Iterator[None]:
    """Tag every log line emitted inside the block with the rule set in use."""
    with structlog.contextvars.bound_contextvars(rule_version=rule_version, **fields):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
