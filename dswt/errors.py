"""
DSWT exception hierarchy.

Every error raised by the codec, token and manager derives from DSWTError so
callers can catch the whole family at once.
"""


class DSWTError(Exception):
    """Base exception for DSWT errors."""

    pass


class InvalidPayloadField(DSWTError, ValueError):
    """Raised when a payload key or value cannot be encoded unambiguously."""

    def __init__(self, message: str = "Invalid payload field"):
        super().__init__(message)


class UnknownAlgorithm(DSWTError, ValueError):
    """Raised when a header names an algorithm that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown algorithm: {name!r}")


class MalformedToken(DSWTError, ValueError):
    """Raised when a wire string does not follow the token grammar."""

    def __init__(self, message: str = "Malformed token"):
        super().__init__(message)


class VerificationFailed(DSWTError):
    """Raised when a well-formed token carries a tag that does not match."""

    def __init__(self, message: str = "Token signature verification failed"):
        super().__init__(message)
