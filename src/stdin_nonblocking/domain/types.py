"""Domain types — aliases for stream units and fallback values."""

from typing import TypeAlias, TypeVar

InputUnit: TypeAlias = str | bytes

# One stream carries exactly one unit variant.
UnitT = TypeVar("UnitT", str, bytes)
