"""Exception classes raised by the augmentation pipeline.

Every failure surfaces to the caller as one of these. Disabled effects are
never an error.
"""

from typing import Any, Dict, Optional


class AugmentationError(Exception):
    """
    Base exception for all augmentation errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error context.
    """

    def __init__(self, message: str = "Image augmentation failed", details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidImage(AugmentationError, ValueError):
    """Raised when the input cannot be decoded or has a zero dimension."""

    def __init__(self, message: str = "Invalid image", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message=message, details=details)


class InvalidConfiguration(AugmentationError, ValueError):
    """Raised when a transformation configuration fails validation."""

    def __init__(
        self, message: str = "Invalid transformation configuration", details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message=message, details=details)


class TransformFailure(AugmentationError, RuntimeError):
    """Raised when a geometric or photometric stage fails."""

    def __init__(self, message: str = "Transformation failed", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message=message, details=details)
