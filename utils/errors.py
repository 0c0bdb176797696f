"""
Defines custom exception classes for the application.
"""

class AIReviewException(Exception):
    """Base exception class for aireview application."""
    pass

class DiffReaderError(AIReviewException):
    """Raised when the working tree changes cannot be read."""
    pass

class ProviderError(AIReviewException):
    """Raised when an error occurs with an LLM provider."""
    pass

class FormatterError(AIReviewException):
    """Raised when an error occurs while rendering a document."""
    pass

class ConfigError(AIReviewException):
    """Raised when there is a configuration error."""
    pass

class ToolError(AIReviewException):
    """Raised when a tool cannot be found or built."""
    pass
