"""Error and result data structures for the validation bridge.

Validation of a submission yields a ValidationResult mapping canonical field
paths to human-readable messages. Errors that do not belong to any field
(model-level validators) are reported under FORM_ERROR_KEY.
"""

from dataclasses import dataclass, field
from typing import Any

FORM_ERROR_KEY = "__form__"


class ValidationFailure(Exception):
    """Raised when a submission does not satisfy the schema."""

    def __init__(self, errors_by_path: dict[str, str]):
        self.errors_by_path = dict(errors_by_path)
        super().__init__(f"{len(self.errors_by_path)} field(s) failed validation")


@dataclass
class ValidationResult:
    """Complete validation result of a form submission.

    Contains the overall status, the error message per field path and,
    when validation succeeded, the validated model and the decoded data.
    """

    valid: bool
    errors_by_path: dict[str, str] = field(default_factory=dict)
    model: Any | None = None
    data: dict[str, Any] | None = None

    @classmethod
    def from_failure(
        cls, failure: ValidationFailure, data: dict[str, Any] | None = None
    ) -> "ValidationResult":
        """Build a failed result from a raised ValidationFailure."""
        return cls(valid=False, errors_by_path=dict(failure.errors_by_path), data=data)

    @property
    def error_count(self) -> int:
        """Number of fields with errors."""
        return len(self.errors_by_path)

    def message_for(self, path: str) -> str | None:
        """Error message for a field path, if any."""
        return self.errors_by_path.get(path)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result for JSON responses."""
        return {"valid": self.valid, "errors": dict(self.errors_by_path)}

    def __str__(self) -> str:
        """Return a formatted string representation of the validation result."""
        if self.valid:
            return "✅ Valid"

        lines = [f"❌ Invalid ({self.error_count} errors)", "", "Errors:"]
        for path, message in self.errors_by_path.items():
            lines.append(f"  - {path}: {message}")
        return "\n".join(lines)


@dataclass
class FieldValidationResult:
    """Result of validating a single field value in isolation."""

    path: str
    valid: bool
    message: str | None = None
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result for the live-validation endpoint."""
        data: dict[str, Any] = {"field": self.path, "valid": self.valid}
        if self.message is not None:
            data["message"] = self.message
        return data
