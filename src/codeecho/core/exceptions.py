"""Exceptions raised by the aggregation engine and its repository sources."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CodeEchoError(Exception):
    """Base exception for codeecho errors."""

    message: str = "Internal Server Error"
    status_code: int = 500

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class AuthenticationError(CodeEchoError):
    """Raised when a request carries no usable credentials."""

    message: str = "Unauthorized"
    status_code: int = 401


@dataclass(frozen=True)
class UpstreamLookupError(CodeEchoError):
    """Raised when the source rejects a branch, commit or listing lookup."""

    message: str = "Upstream lookup failed"
    status_code: int = 400


@dataclass(frozen=True)
class BlobFetchError(CodeEchoError):
    """Raised when a single blob cannot be retrieved."""

    path: str = ""
    message: str = "Blob fetch failed"
