#  -----------------------------------------------------------------------------
#  Copyright (c) 2024 Bud Ecosystem Inc.
#  #
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#  #
#      http://www.apache.org/licenses/LICENSE-2.0
#  #
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.
#  -----------------------------------------------------------------------------

"""Structured logging for budtelemetry.

Library modules obtain loggers through `get_logger`. Applications embedding
budtelemetry may call `configure_logging` once at startup; settings are read
from ``BUDTELEMETRY_LOG_*`` environment variables unless passed explicitly.
"""

from __future__ import annotations

import logging
import sys
from typing import Literal

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import LogLevel


class LoggingSettings(BaseSettings):
    """Logging settings for the library.

    Attributes:
        level (LogLevel): Minimum level for emitted records (``BUDTELEMETRY_LOG_LEVEL``).
        renderer (str): ``json`` for production output or ``console`` for colored
            development output (``BUDTELEMETRY_LOG_RENDERER``).
    """

    model_config = SettingsConfigDict(env_prefix="BUDTELEMETRY_LOG_", extra="ignore")

    level: LogLevel = Field(LogLevel.INFO)
    renderer: Literal["json", "console"] = Field("json")


def configure_logging(settings: LoggingSettings | None = None) -> LoggingSettings:
    """Configure structlog and the standard library logging module.

    Args:
        settings: Settings to apply. Read from the environment when omitted.

    Returns:
        The applied settings.
    """
    settings = settings or LoggingSettings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.renderer == "console":
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.level.value, logging.INFO),
    )

    return settings


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger.

    Args:
        name: Logger name, usually the module's ``__name__``.

    Returns:
        A structlog logger instance.
    """
    return structlog.get_logger(name)
