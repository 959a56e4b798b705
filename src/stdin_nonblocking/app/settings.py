"""CLI settings — Pydantic BaseSettings loaded from environment and .env."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from stdin_nonblocking.domain.models import DEFAULT_CHUNK_SIZE, DEFAULT_SETTLE_DELAY_SECONDS


class StdinSettings(BaseSettings):
    """Configuration for the ``stdin-nonblocking`` command.

    The library itself reads no environment; these values only reach it
    through ``bootstrap.create_gateway``.
    """

    # Bounded wait
    settle_delay_seconds: float = Field(
        default=DEFAULT_SETTLE_DELAY_SECONDS, ge=0.0, le=5.0, description="Delay before draining stdin"
    )

    # Reader
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1, description="Max bytes per binary chunk")
    thread_name: str = Field(default="stdin-reader", min_length=1, description="Name of the reader thread")

    # Async / poll modes
    async_buffer_size: int = Field(default=10, ge=1, description="Bounded asyncio queue size")
    poll_interval_seconds: float = Field(default=0.5, gt=0.0, description="Sleep between polls in poll mode")

    # Output
    fallback: str = Field(default="fallback_value", description="Value printed when no input is available")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING", description="Log level")

    model_config = {
        "env_prefix": "STDIN_NONBLOCKING_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }
