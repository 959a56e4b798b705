"""Bootstrap — composition root turning settings into a ready StdinGateway."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from stdin_nonblocking.app.settings import StdinSettings
from stdin_nonblocking.application.stdin_gateway import StdinGateway
from stdin_nonblocking.domain.errors import ConfigurationError
from stdin_nonblocking.domain.models import ReaderConfig

logger = logging.getLogger(__name__)


def load_settings(**overrides: object) -> StdinSettings:
    """Load settings from environment/.env, applying explicit overrides.

    Raises ConfigurationError if any value fails validation.
    """
    try:
        return StdinSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc.error_count()} error(s)\n{exc}") from exc


def reader_config(settings: StdinSettings) -> ReaderConfig:
    """Translate CLI settings into the library's reader configuration."""
    try:
        return ReaderConfig(
            settle_delay_seconds=settings.settle_delay_seconds,
            chunk_size=settings.chunk_size,
            thread_name=settings.thread_name,
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def create_gateway(settings: StdinSettings | None = None) -> StdinGateway:
    """Wire a StdinGateway bound to ``sys.stdin``.

    If no settings are provided, loads from environment/.env.
    """
    if settings is None:
        settings = load_settings()

    config = reader_config(settings)
    logger.debug(
        "Gateway configured: settle_delay=%.3fs chunk_size=%d",
        config.settle_delay_seconds,
        settings.chunk_size,
    )
    return StdinGateway(config=config)
