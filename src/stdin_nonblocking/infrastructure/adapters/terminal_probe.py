"""TerminalProbe — classify stdin as an interactive terminal or redirected input."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stdin_nonblocking.domain.ports import InputSource, TerminalProbe

logger = logging.getLogger(__name__)


def is_interactive(source: InputSource | None = None) -> bool:
    """Return True if *source* (default ``sys.stdin``) is attached to a terminal.

    Evaluated per call and never cached. When the platform query is
    unavailable (no stdin, closed stream, object without ``isatty``) the
    source is classified as non-interactive.
    """
    if source is None:
        source = sys.stdin
    if source is None:
        logger.debug("No stdin attached — classifying as non-interactive")
        return False

    try:
        return bool(source.isatty())
    except (AttributeError, ValueError, OSError) as exc:
        logger.debug("Terminal query unavailable (%s) — classifying as non-interactive", exc)
        return False


if TYPE_CHECKING:
    _protocol_check: TerminalProbe = is_interactive
