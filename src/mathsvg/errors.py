"""Exception taxonomy shared by every transport."""

from __future__ import annotations

from typing import Iterable

from mathsvg.constants import APPLICATION_ERROR


class MathSvgError(Exception):
    """Base class for errors reported back to a caller."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MathSvgError):
    """Missing or invalid request fields; raised before the backend is called."""


class BackendError(MathSvgError):
    """The typesetting backend reported errors for a request."""

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages = [str(m) for m in messages]
        super().__init__(f"MathJax error: {', '.join(self.messages)}")


class BackendUnavailable(BackendError):
    """The backend process could not be started, died, or timed out."""

    def __init__(self, message: str) -> None:
        self.messages = [message]
        MathSvgError.__init__(self, message)


class TransportError(MathSvgError):
    """Malformed envelope, unknown RPC method, or stream failure."""

    def __init__(self, message: str, code: int = APPLICATION_ERROR) -> None:
        super().__init__(message)
        self.code = code
