"""Error hierarchy for DTLS wire-format handling.

Each error tells whether the connection survives it (``temporary``) and
whether it was caused by a deadline (``timeout``).
"""

from __future__ import annotations


class DTLSError(Exception):
    """Base class of every error raised by this package."""

    prefix = "dtls"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"

    def timeout(self) -> bool:
        """Whether the error was caused by a timeout."""
        return False

    def temporary(self) -> bool:
        """Whether the connection is still usable after this error."""
        return False


class FatalError(DTLSError):
    """The connection is no longer available, usually through misconfiguration."""

    prefix = "dtls fatal"


class InternalError(DTLSError):
    """The connection is no longer available because of an implementation fault."""

    prefix = "dtls internal"


class TemporaryError(DTLSError):
    """The request failed, but the connection is still available."""

    prefix = "dtls temporary"

    def temporary(self) -> bool:
        return True


class DTLSTimeoutError(DTLSError):
    """The request timed out."""

    prefix = "dtls timeout"

    def timeout(self) -> bool:
        return True

    def temporary(self) -> bool:
        return True


class HandshakeError(DTLSError):
    """The handshake failed; wraps the error that caused it."""

    prefix = "handshake error"

    def __init__(self, err: BaseException) -> None:
        super().__init__(str(err))
        self.err = err
        self.__cause__ = err

    def timeout(self) -> bool:
        if isinstance(self.err, DTLSError):
            return self.err.timeout()
        return isinstance(self.err, TimeoutError)

    def temporary(self) -> bool:
        if isinstance(self.err, DTLSError):
            return self.err.temporary()
        return isinstance(self.err, TimeoutError)


class BufferTooSmallError(TemporaryError):
    """The input ended before a complete structure could be read."""

    def __init__(self, message: str = "buffer is too small") -> None:
        super().__init__(message)


class LengthMismatchError(InternalError):
    """A declared length does not agree with the data present."""

    def __init__(
        self, message: str = "data length and declared length do not match"
    ) -> None:
        super().__init__(message)