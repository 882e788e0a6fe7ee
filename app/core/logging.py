import logging
import logging.config
import sys
from typing import Any, Dict, List

import sentry_sdk
import structlog

from app.core.config import Settings, settings as default_settings

_CONSOLE_ENVIRONMENTS = {"local", "dev", "development"}


def setup_logging(config: Settings = default_settings) -> None:
    """
    Configure structured logging for the service.
    - Local/dev: pretty console output.
    - Everything else: one JSON object per line.
    - Sentry is initialised only when a DSN is configured.
    """
    shared_processors: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if config.SENTRY_DSN:
        sentry_sdk.init(
            dsn=config.SENTRY_DSN,
            environment=config.ENVIRONMENT,
            traces_sample_rate=1.0 if config.ENVIRONMENT in _CONSOLE_ENVIRONMENTS else 0.1,
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer_processor = (
        structlog.dev.ConsoleRenderer()
        if config.ENVIRONMENT in _CONSOLE_ENVIRONMENTS
        else structlog.processors.JSONRenderer()
    )

    # uvicorn loggers go through the same formatter so access logs stay structured
    uvicorn_logger = {
        "handlers": ["default"],
        "level": "INFO",
        "propagate": False,
    }
    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": renderer_processor,
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "default": {
                "level": config.LOG_LEVEL,
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "default",
            },
        },
        "loggers": {
            "": {
                "handlers": ["default"],
                "level": config.LOG_LEVEL,
                "propagate": True,
            },
            "uvicorn": uvicorn_logger,
            "uvicorn.error": uvicorn_logger,
            "uvicorn.access": uvicorn_logger,
        },
    }

    logging.config.dictConfig(logging_config)
