"""
Validation module for Mermaid diagram text.
"""

from conceptmap.validation.diagram_validator import (
    DiagramValidator,
    ValidationIssue,
    ValidationResult,
    validate_diagram,
    get_validation_summary,
)

from conceptmap.validation.diagram_fixer import (
    DiagramAutoFixer,
    FixResult,
)


def validate(text) -> ValidationResult:
    """Validate diagram text with the default grammar minimums."""
    return validate_diagram(text)


__all__ = [
    "validate",
    "validate_diagram",
    "get_validation_summary",
    "DiagramValidator",
    "DiagramAutoFixer",
    "ValidationResult",
    "ValidationIssue",
    "FixResult",
]
