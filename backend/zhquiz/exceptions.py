"""
Exception types for quiz generation, scoring and session handling.

Service-side errors are mapped to HTTP responses in the quiz router; the
generation client folds every failure into a single GenerationError.
"""

from __future__ import annotations

from typing import Optional


class QuizError(Exception):
    """Base exception for all quiz errors."""
    pass


class ConfigurationError(QuizError):
    """Raised when the upstream model credential is not configured."""
    pass


class InvalidParametersError(QuizError):
    """Raised when generation parameters are missing or malformed."""
    pass


class UpstreamError(QuizError):
    """Raised when the model call fails or returns unusable content."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        self.raw_text = raw_text
        super().__init__(message)


class TransportError(QuizError):
    """Raised when the quiz service cannot be reached."""
    pass


class GenerationError(QuizError):
    """User-presentable failure raised by the generation client."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SessionStateError(QuizError):
    """Raised when a session operation is not allowed in the current state."""
    pass


class InvalidAnswerError(QuizError):
    """Raised when an answer does not fit the question it is given for."""
    pass
