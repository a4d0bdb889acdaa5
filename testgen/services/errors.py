"""Error taxonomy for the generation-and-assembly pipeline."""

from __future__ import annotations

from typing import Optional


class AssessmentGenerationError(RuntimeError):
    """Base class for every failure raised by the pipeline."""


class ConfigurationError(AssessmentGenerationError):
    """Raised when required configuration (e.g. the API key) is missing."""


class InvalidRequestError(AssessmentGenerationError):
    """Raised when the requested assessment cannot be generated as asked."""


class UnsupportedKind(AssessmentGenerationError):
    """Raised for a question kind outside the closed set."""

    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Unknown question type: {kind}")


class RateLimitExceeded(AssessmentGenerationError):
    """Raised when the service keeps rate limiting after all retries."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"API Error: 429 - rate limit exceeded after {attempts} attempts")


class TransportFailure(AssessmentGenerationError):
    """Raised when the connection keeps failing after all retries."""

    def __init__(self, attempts: int, cause: Exception) -> None:
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Network error after {attempts} attempts: {cause}")


class ServiceError(AssessmentGenerationError):
    """Raised for a non-success status other than a rate limit."""

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        self.message = message or "Unknown error"
        super().__init__(f"API Error: {status} - {self.message}")


class FormatError(AssessmentGenerationError):
    """Raised when a successful response lacks the expected text payload."""


class ExtractionError(AssessmentGenerationError):
    """Raised when no JSON payload can be located or parsed in a reply."""


class ItemValidationError(AssessmentGenerationError):
    """Raised when a parsed item does not match its kind's schema."""
