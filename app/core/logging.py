import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from app.core.config import Settings, settings


def _add_app_env(app_env: str) -> Processor:
    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app_env", app_env)
        return event_dict

    return processor


def setup_logging(config: Settings = settings) -> None:
    """JSON logs on stdout.

    Fields bound with ``structlog.contextvars`` (the request line in
    ``app.main``, the campaign and mode in ``IssuanceService``) are merged into
    every event logged while they are bound.
    """
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(message)s",
        stream=sys.stdout,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_app_env(config.APP_ENV),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
