"""Domain enums — read modes and result provenance."""

from enum import Enum, unique


@unique
class ReadMode(Enum):
    """Unit variant carried by a stream for its whole lifetime."""

    TEXT = "text"
    BINARY = "binary"


@unique
class ResultSource(Enum):
    """Where a façade result came from."""

    INPUT = "input"
    FALLBACK = "fallback"
    NONE = "none"
