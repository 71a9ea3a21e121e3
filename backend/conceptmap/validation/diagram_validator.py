"""
Diagram Validator - Checks Mermaid flowchart text against the grammar subset
the renderer accepts.

Catches issues like:
- Missing or malformed header line
- Lines that are neither node, edge, style directive, comment nor blank
- Style directives interleaved with structural content
- Documents too small to be a useful concept map

Every problem is reported with its line number; nothing is fail-fast.
Mechanically fixable problems are repaired by DiagramAutoFixer and the
corrected text is returned alongside the diagnostics.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from conceptmap.dsl.mermaid import (
    DEFAULT_HEADER,
    VALID_DIRECTIONS,
    LineKind,
    LineToken,
    repair_header,
    tokenize,
)

logger = logging.getLogger(__name__)


# Document-level issues are reported on line 0
DOCUMENT_LINE = 0


@dataclass
class ValidationIssue:
    """A single grammar violation found in the document"""
    line: int
    message: str
    code: str                 # Machine-readable issue code
    fixable: bool = False

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "message": self.message,
            "code": self.code,
            "fixable": self.fixable,
        }


@dataclass
class ValidationResult:
    """Result of diagram validation"""
    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    sanitized_text: Optional[str] = None
    corrections: List[str] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def corrected(self) -> bool:
        return self.sanitized_text is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "sanitized_text": self.sanitized_text,
            "corrections": self.corrections,
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        """Get human-readable summary"""
        status = "Valid" if self.valid else "Invalid"
        fixed = " | auto-corrected" if self.corrected else ""
        return f"{status} | Errors: {self.error_count}{fixed}"


class DiagramValidator:
    """
    Validates Mermaid flowchart text line by line.

    Usage:
        validator = DiagramValidator()
        result = validator.validate(text)

        if not result.valid:
            for issue in result.errors:
                print(f"line {issue.line}: {issue.message}")
    """

    def __init__(self, min_nodes: int = 2, min_edges: int = 1):
        self.min_nodes = min_nodes
        self.min_edges = min_edges

    def validate(self, text: Any) -> ValidationResult:
        """Validate the entire document."""
        if not isinstance(text, str) or not text.strip():
            return ValidationResult(
                valid=False,
                errors=[ValidationIssue(
                    line=DOCUMENT_LINE,
                    message="Diagram is empty or not a string",
                    code="EMPTY_DOCUMENT",
                )],
                stats={"nodes": 0, "edges": 0, "styles": 0},
            )

        tokens = tokenize(text)
        issues: List[ValidationIssue] = []

        header_issue, body = self._check_header(tokens)
        if header_issue:
            issues.append(header_issue)

        issues.extend(self._check_lines(body, self._first_blank_line(body)))

        stats = self._calculate_stats(body)
        issues.extend(self._check_structure(stats))

        result = ValidationResult(valid=not issues, errors=issues, stats=stats)

        if any(issue.fixable for issue in issues):
            # Imported here: the fixer depends on this module's types
            from conceptmap.validation.diagram_fixer import DiagramAutoFixer

            fix = DiagramAutoFixer().fix(tokens, issues)
            if fix.changes_made:
                result.sanitized_text = fix.text
                result.corrections = fix.changes_made

        if result.valid:
            logger.debug("[VALIDATOR] %s", result.get_summary())
        else:
            logger.info("[VALIDATOR] %s", result.get_summary())
            for issue in issues:
                logger.debug("[VALIDATOR] line %d [%s] %s", issue.line, issue.code, issue.message)

        return result

    # ============================================================
    # HEADER
    # ============================================================

    def _check_header(self, tokens: List[LineToken]):
        """
        Returns (issue or None, body tokens).

        Body tokens are every token except the header line itself, or except a
        malformed header attempt that the fixer will replace.
        """
        first = tokens[0]
        expected = (
            f"expected 'graph' or 'flowchart' followed by one of "
            f"{', '.join(VALID_DIRECTIONS)}"
        )

        if first.kind == LineKind.HEADER:
            return None, tokens[1:]

        if first.kind == LineKind.BLANK:
            leading = next((t for t in tokens if t.kind != LineKind.BLANK), None)
            if leading is not None and leading.kind == LineKind.HEADER:
                return (
                    ValidationIssue(
                        line=1,
                        message=f"Header must be on line 1, found on line {leading.line_no}",
                        code="HEADER_NOT_FIRST",
                        fixable=True,
                    ),
                    [t for t in tokens if t.line_no > leading.line_no],
                )

        if first.kind == LineKind.UNKNOWN and repair_header(first.text) is not None:
            return (
                ValidationIssue(
                    line=1,
                    message=f"Invalid graph declaration: '{first.text}', {expected}",
                    code="MALFORMED_HEADER",
                    fixable=True,
                ),
                tokens[1:],
            )

        return (
            ValidationIssue(
                line=1,
                message=f"Missing graph declaration, {expected} (e.g. '{DEFAULT_HEADER}')",
                code="MISSING_HEADER",
                fixable=True,
            ),
            tokens,
        )

    # ============================================================
    # PER-LINE CLASSIFICATION
    # ============================================================

    @staticmethod
    def _first_blank_line(tokens: List[LineToken]) -> Optional[int]:
        return next((t.line_no for t in tokens if t.kind == LineKind.BLANK), None)

    def _check_lines(
        self,
        body: List[LineToken],
        first_blank: Optional[int],
    ) -> List[ValidationIssue]:
        issues = []
        for token in body:
            if token.kind in (LineKind.BLANK, LineKind.COMMENT, LineKind.NODE, LineKind.EDGE):
                continue

            if token.kind == LineKind.STYLE:
                if first_blank is None or token.line_no < first_blank:
                    issues.append(ValidationIssue(
                        line=token.line_no,
                        message=(
                            f"Style directive must appear after the first blank line: "
                            f"'{token.text}'"
                        ),
                        code="MISPLACED_STYLE",
                        fixable=True,
                    ))
                continue

            if token.kind == LineKind.HEADER:
                issues.append(ValidationIssue(
                    line=token.line_no,
                    message=f"Unexpected graph declaration after line 1: '{token.text}'",
                    code="DUPLICATE_HEADER",
                ))
                continue

            issues.append(ValidationIssue(
                line=token.line_no,
                message=(
                    f"Invalid Mermaid syntax: '{token.text}'. "
                    f"Expected node definition, edge, or style directive."
                ),
                code="UNRECOGNIZED_LINE",
                fixable=True,
            ))
        return issues

    # ============================================================
    # DOCUMENT-LEVEL CHECKS
    # ============================================================

    def _check_structure(self, stats: Dict[str, int]) -> List[ValidationIssue]:
        issues = []
        if stats["nodes"] < self.min_nodes:
            issues.append(ValidationIssue(
                line=DOCUMENT_LINE,
                message=(
                    f"Insufficient nodes: found {stats['nodes']}, "
                    f"need at least {self.min_nodes} node definitions"
                ),
                code="INSUFFICIENT_NODES",
            ))
        if stats["edges"] < self.min_edges:
            issues.append(ValidationIssue(
                line=DOCUMENT_LINE,
                message=(
                    f"Insufficient edges: found {stats['edges']}, "
                    f"need at least {self.min_edges} edge connecting nodes"
                ),
                code="INSUFFICIENT_EDGES",
            ))
        return issues

    def _calculate_stats(self, body: List[LineToken]) -> Dict[str, int]:
        counts = {kind: 0 for kind in LineKind}
        for token in body:
            counts[token.kind] += 1
        return {
            "nodes": counts[LineKind.NODE],
            "edges": counts[LineKind.EDGE],
            "styles": counts[LineKind.STYLE],
            "comments": counts[LineKind.COMMENT],
            "unrecognized": counts[LineKind.UNKNOWN],
        }


def validate_diagram(text: Any, min_nodes: int = 2, min_edges: int = 1) -> ValidationResult:
    """Convenience function to validate diagram text."""
    validator = DiagramValidator(min_nodes=min_nodes, min_edges=min_edges)
    return validator.validate(text)


def get_validation_summary(text: Any) -> str:
    """Get a quick validation summary string."""
    return validate_diagram(text).get_summary()
