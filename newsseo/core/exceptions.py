"""
Exception hierarchy for newsseo.

Every error carries a machine-readable code and a context dict so the web
layer and the CLI can log it in a uniform way.
"""
from typing import Any, Dict, Optional


class NewsSeoError(Exception):
    """Base exception for all newsseo errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Article-related exceptions
class ArticleError(NewsSeoError):
    """Base exception for article errors."""
    pass


class InvalidArticleError(ArticleError):
    """Article fields violate an invariant."""

    def __init__(self, reason: str, slug: Optional[str] = None):
        message = f"Invalid article {slug!r}: {reason}" if slug else f"Invalid article: {reason}"
        super().__init__(message, context={'slug': slug, 'reason': reason})


class DuplicateSlugError(ArticleError):
    """An article with this slug is already published."""

    def __init__(self, slug: str):
        super().__init__(f"Article slug already exists: {slug}", context={'slug': slug})


class ArticleNotFoundError(ArticleError):
    """No article matches the requested slug."""

    def __init__(self, slug: str):
        super().__init__(f"Article not found: {slug}", context={'slug': slug})


# Rendering exceptions
class StructuredDataError(NewsSeoError):
    """Structured data cannot be built for an article."""

    def __init__(self, missing_fields, slug: Optional[str] = None):
        fields = ", ".join(missing_fields)
        super().__init__(
            f"Cannot build structured data, missing required field(s): {fields}",
            context={'slug': slug, 'missing_fields': list(missing_fields)}
        )


# Configuration exceptions
class ConfigError(NewsSeoError):
    """Configuration file could not be loaded or is invalid."""
    pass


# Integration exceptions
class PingError(NewsSeoError):
    """Notifying a search engine about the sitemap failed."""

    def __init__(self, endpoint: str, original_error: Exception):
        super().__init__(
            f"Failed to ping {endpoint}",
            context={'endpoint': endpoint, 'original_error': str(original_error)}
        )
