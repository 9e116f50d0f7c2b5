class AIServiceError(Exception):
    """Base exception for AI provider operations."""


class ExtractionError(AIServiceError):
    """Raised when document extraction fails or returns unusable output."""


class CategorizationError(AIServiceError):
    """Raised when transaction categorization fails or returns unusable output."""


class AINetworkError(AIServiceError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
