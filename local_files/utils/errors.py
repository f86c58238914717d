"""Error types for Local Files."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Closed set of failure kinds, valued by their string code."""

    INVALID_INPUT = "TypeError"
    NOT_FOUND = "ENOTFOUND"
    FAULT = "EFAULT"
    SEQUENCE = "ESEQ"
    PROBE_FAILED = "EPROBE"
    PARSE_FAILED = "EPARSE"


class LocalFilesError(Exception):
    """Base error carrying a kind plus the offending path or uri."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        path: Optional[str] = None,
        uri: Optional[str] = None,
        hint: Optional[str] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.path = path
        self.uri = uri
        self.hint = hint

    @property
    def code(self) -> str:
        return self.kind.value

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.uri:
            parts.append(f"uri: {self.uri}")
        elif self.path:
            parts.append(f"path: {self.path}")
        if self.hint:
            parts.append(f"hint: {self.hint}")
        return ' | '.join(parts)


class InvalidInputError(LocalFilesError, TypeError):
    """Raised for malformed input such as a non-string uri."""

    def __init__(self, message: str, **kwargs):
        super().__init__(ErrorKind.INVALID_INPUT, message, **kwargs)


class SequenceError(LocalFilesError):
    """Raised when an operation is called without its prerequisite step."""

    def __init__(self, message: str, hint: str, **kwargs):
        super().__init__(ErrorKind.SEQUENCE, message, hint=hint, **kwargs)


class ProbeError(LocalFilesError):
    """Raised when the probe tool fails or its output can't be used."""
