"""Validation result types shared by the config loader."""

from dataclasses import dataclass, field


@dataclass
class ValidationIssue:
    """One problem found in a configuration mapping."""

    path: str  # dotted key, e.g. "templates.encoding"
    message: str
    severity: str = "error"  # "error" | "warning"

    def __str__(self) -> str:
        return f"- {self.path}: {self.message}"


@dataclass
class ValidationResult:
    """Errors and warnings collected by ``ConfigLoader.validate()``."""

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.errors:
            self.valid = False

    def error_report(self) -> str:
        """One line per error, for CONFIG_INVALID details."""
        return "\n".join(str(issue) for issue in self.errors)
