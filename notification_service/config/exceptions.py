"""Custom exceptions for configuration management."""

from typing import List, Optional

from pydantic import ValidationError


class ConfigurationError(Exception):
    """
    Exception raised when configuration is missing or invalid.

    Carries a list of individual validation errors and suggestions, and
    renders them as a readable multi-line message.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]

        if self.errors:
            parts.append("\nValidation Errors:")
            for i, error in enumerate(self.errors, 1):
                parts.append(f"  {i}. {error}")

        if self.suggestions:
            parts.append("\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"  - {suggestion}")

        return "\n".join(parts)

    @classmethod
    def from_validation_error(
        cls,
        exc: ValidationError,
        message: str = "Configuration validation failed",
        suggestions: Optional[List[str]] = None,
    ) -> "ConfigurationError":
        """Translate a pydantic ValidationError into readable field errors."""
        errors = []
        for error in exc.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"]) or "(root)"
            error_type = error["type"]

            if error_type == "missing":
                errors.append(f"Missing required field: {field_path}")
            elif error_type in ("string_type", "int_type", "bool_type", "list_type"):
                expected = error_type.replace("_type", "")
                errors.append(
                    f"Invalid type for '{field_path}': expected {expected}, got {error.get('input')!r}"
                )
            elif error_type == "enum":
                errors.append(f"Invalid value for '{field_path}': {error['msg']}")
            else:
                errors.append(f"{field_path}: {error['msg']}")

        return cls(message, errors=errors, suggestions=suggestions)
