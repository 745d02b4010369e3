"""
Exception hierarchy for the spectral analysis engine.

Invalid configuration and empty input are surfaced to the caller.
Degenerate but valid signals (silence, no peaks, no harmonics) are
not errors and produce an empty or zeroed result instead.
"""

from typing import Any, Optional


class SpectrascopeError(Exception):
    """Base exception for all spectrascope errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class InvalidParameter(SpectrascopeError, ValueError):
    """Raised when a size, rate or threshold is out of its valid range."""

    def __init__(self, message: str, parameter: Optional[str] = None, value: Any = None):
        details = {"parameter": parameter, "value": value} if parameter else None
        super().__init__(message, details=details)
        self.parameter = parameter
        self.value = value


class EmptyInput(SpectrascopeError, ValueError):
    """Raised when the sample buffer contains no samples."""


class AudioLoadError(SpectrascopeError):
    """Raised when an audio file cannot be read."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path
