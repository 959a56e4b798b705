"""Domain errors — stdin reader exception hierarchy."""


class StdinError(Exception):
    """Base error for all stdin reader operations.

    Use ``raise StdinError("msg") from cause`` for exception chaining.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(StdinError):
    """Invalid settings or reader configuration."""


class StreamClosedError(StdinError):
    """Blocking receive attempted on a stream whose consumer end was closed."""


class DecodeError(StdinError):
    """A text line could not be decoded as UTF-8."""
