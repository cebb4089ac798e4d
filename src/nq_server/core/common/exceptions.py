"""
Common exception classes for the network quality server.

This module defines custom exception classes used throughout the application
for better error handling and categorization.
"""

from __future__ import annotations


class NetworkQualityError(Exception):
    """Base exception class for all network quality server errors."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        *,
        status_code: int | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
            status_code: Optional HTTP status code hint for transport adapters
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code or 500

    def to_dict(self) -> dict:
        return {
            "error": {
                "message": self.message,
                "type": self.__class__.__name__,
                "details": self.details,
            }
        }


class ConfigurationError(NetworkQualityError):
    """Raised when there's a configuration issue."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict | None = None,
    ):
        super().__init__(message, details, status_code=400)


class UploadDrainError(NetworkQualityError):
    """Raised when an upload body cannot be fully drained."""

    def __init__(
        self,
        message: str = "Upload body could not be drained",
        details: dict | None = None,
    ):
        super().__init__(message, details, status_code=400)


class InitializationError(NetworkQualityError):
    def __init__(
        self,
        message: str = "Initialization failed",
        details: dict | None = None,
    ):
        super().__init__(message, details, status_code=500)
