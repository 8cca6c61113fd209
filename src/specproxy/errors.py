from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    DESCRIPTOR_MISSING = "DESCRIPTOR_MISSING"
    DESCRIPTOR_MALFORMED = "DESCRIPTOR_MALFORMED"
    STUB_HEADER_INVALID = "STUB_HEADER_INVALID"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"


class SpecProxyError(Exception):
    """Base error carrying a machine-readable code and remediation hint."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str = "",
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} {self.suggestion}"
        return self.message


class DescriptorError(SpecProxyError):
    """A package's metadata record is missing, unreadable, or broken."""
