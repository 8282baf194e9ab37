"""
errors.py — Exception taxonomy for composition, customization and export.

Composition errors are collected exhaustively (every missing variable in
one error). Export errors are isolated per format and per batch item by
the export manager, which turns them into structured result objects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DocForgeError(Exception):
    """Root exception for all docforge errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging and API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# COMPOSITION
# =============================================================================

class CompositionErrorKind(str, Enum):
    """Why a composition failed."""
    MISSING_REQUIRED_VARIABLE = "MissingRequiredVariable"
    MALFORMED_PLACEHOLDER = "MalformedPlaceholder"


class CompositionError(DocForgeError):
    """A template could not be composed with the supplied data."""

    def __init__(
        self,
        kind: CompositionErrorKind,
        message: str | None = None,
        *,
        missing_variables: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.kind = kind
        self.missing_variables = list(missing_variables or [])
        if message is None and self.missing_variables:
            message = "Missing required variables: " + ", ".join(self.missing_variables)
        super().__init__(message or kind.value, context=context)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind.value
        data["missing_variables"] = self.missing_variables
        return data


# =============================================================================
# VALIDATION
# =============================================================================

@dataclass
class FieldError:
    """A single field-level validation message."""
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationError(DocForgeError):
    """Schema or customization input was rejected."""

    def __init__(self, errors: list[FieldError] | FieldError, *, context: dict[str, Any] | None = None):
        if isinstance(errors, FieldError):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors), context=context)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [e.to_dict() for e in self.errors]
        return data


# =============================================================================
# EXPORT
# =============================================================================

class ExportError(DocForgeError):
    """One export sub-pipeline failed."""

    def __init__(self, format: str, message: str, *, context: dict[str, Any] | None = None):
        self.format = format
        super().__init__(message, context=context)

    def __str__(self) -> str:
        return f"{self.format}: {self.message}"


class RendererTimeoutError(ExportError):
    """An external renderer or codec did not answer in time."""


class PatternNotFoundError(DocForgeError, KeyError):
    """Unknown catalog pattern or custom pattern id."""

    def __init__(self, pattern_id: str):
        self.pattern_id = pattern_id
        super().__init__(f"Pattern not found: {pattern_id}", context={"pattern_id": pattern_id})

    def __str__(self) -> str:
        return self.message


class OptimizationWarning(UserWarning):
    """Non-fatal optimization failure; reported in ``ExportResult.warnings``."""
