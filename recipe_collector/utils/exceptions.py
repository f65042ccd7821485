"""Custom exception classes."""

from typing import Any, Dict, Optional


class RecipeCollectorError(Exception):
    """Base exception for the recipe collector."""

    pass


class ValidationError(RecipeCollectorError):
    """Raised when caller-supplied input fails validation."""

    pass


class ScrapingError(RecipeCollectorError):
    """Raised when fetching the source page fails."""

    pass


class GeminiError(RecipeCollectorError):
    """Raised when a Gemini API call fails."""

    pass


class ModelUnavailableError(GeminiError):
    """Raised when no credential is configured, or the model call errors or times out."""

    pass


class ModelResponseError(GeminiError):
    """Raised when a model reply cannot be parsed as a JSON object."""

    def __init__(self, message: str, reason: str = "json_parse_error"):
        super().__init__(message)
        self.reason = reason


class CondenseError(RecipeCollectorError):
    """Structured failure of the condense call, carrying a machine-readable reason code."""

    def __init__(self, message: str, reason: str, suggest: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.suggest = suggest

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.message, "reason": self.reason}
        if self.suggest:
            data["suggest"] = self.suggest
        return data
