"""
Diagram Auto-Fixer - Rule-based repair of Mermaid flowchart text.

Mechanical fixes only (deterministic, no LLM):
- Missing header           -> prepend the default header
- Malformed header         -> rebuild keyword + direction
- Header after blank lines -> drop the leading blank lines
- Misplaced style line     -> move it after a blank line at the end
- Unquoted node label      -> quote it through the sanitizer

Anything else is left untouched and stays reported by the validator.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Set

from conceptmap.dsl.mermaid import (
    DEFAULT_HEADER,
    IDENTIFIER,
    LineKind,
    LineToken,
    repair_header,
)
from conceptmap.dsl.sanitizer import sanitize
from conceptmap.validation.diagram_validator import ValidationIssue

logger = logging.getLogger(__name__)

UNQUOTED_NODE_RE = re.compile(
    rf"^(?P<id>{IDENTIFIER})\s*\[(?P<label>[^\[\]\"]*)\](?::::(?P<cls>{IDENTIFIER}))?\s*;?$"
)


@dataclass
class FixResult:
    """Result of a fix operation"""
    text: str
    issues_fixed: List[str] = field(default_factory=list)
    issues_remaining: List[str] = field(default_factory=list)
    changes_made: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.issues_remaining

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "issues_fixed": self.issues_fixed,
            "issues_remaining": self.issues_remaining,
            "changes_made": self.changes_made,
        }


class DiagramAutoFixer:
    """
    Applies the mechanical fixes for a validated document.

    Usage:
        fixer = DiagramAutoFixer()
        result = fixer.fix(tokens, issues)
        corrected_text = result.text
    """

    # Issue codes this fixer knows how to repair
    AUTO_FIXABLE = {
        "MISSING_HEADER",
        "MALFORMED_HEADER",
        "HEADER_NOT_FIRST",
        "MISPLACED_STYLE",
        "UNRECOGNIZED_LINE",
    }

    def __init__(self, default_header: str = DEFAULT_HEADER):
        self.default_header = default_header

    def fix(self, tokens: List[LineToken], issues: List[ValidationIssue]) -> FixResult:
        codes = {issue.code for issue in issues}
        misplaced_styles: Set[int] = {
            issue.line for issue in issues if issue.code == "MISPLACED_STYLE"
        }
        unrecognized: Set[int] = {
            issue.line for issue in issues if issue.code == "UNRECOGNIZED_LINE"
        }

        changes: List[str] = []
        fixed: List[str] = []
        remaining: List[str] = []
        lines: List[str] = []

        # ---- HEADER ----
        body = tokens
        if "MISSING_HEADER" in codes:
            lines.append(self.default_header)
            changes.append(f"Prepended default header '{self.default_header}'")
            fixed.append("MISSING_HEADER")
        elif "MALFORMED_HEADER" in codes:
            header = repair_header(tokens[0].text) or self.default_header
            lines.append(header)
            body = tokens[1:]
            changes.append(f"Line 1: replaced '{tokens[0].text}' with '{header}'")
            fixed.append("MALFORMED_HEADER")
        elif "HEADER_NOT_FIRST" in codes:
            header = next(t for t in tokens if t.kind != LineKind.BLANK)
            lines.append(header.text)
            body = [t for t in tokens if t.line_no > header.line_no]
            changes.append(f"Removed {header.line_no - 1} blank line(s) before the header")
            fixed.append("HEADER_NOT_FIRST")

        # ---- BODY ----
        moved: List[str] = []
        for token in body:
            if token.line_no in misplaced_styles:
                moved.append(token.text)
                continue

            if token.line_no in unrecognized:
                repaired = self._quote_node_label(token)
                if repaired is None:
                    lines.append(token.raw)
                    remaining.append("UNRECOGNIZED_LINE")
                    continue
                lines.append(repaired)
                changes.append(f"Line {token.line_no}: quoted node label -> {repaired.strip()}")
                fixed.append("UNRECOGNIZED_LINE")
                continue

            lines.append(token.raw)

        # ---- TRAILING STYLES ----
        if moved:
            if not any(not line.strip() for line in lines):
                lines.append("")
            lines.extend(moved)
            changes.append(
                f"Moved {len(moved)} style directive(s) after the first blank line"
            )
            fixed.append("MISPLACED_STYLE")

        remaining.extend(
            issue.code for issue in issues if issue.code not in self.AUTO_FIXABLE
        )

        result = FixResult(
            text="\n".join(lines),
            issues_fixed=sorted(set(fixed)),
            issues_remaining=sorted(set(remaining)),
            changes_made=changes,
        )

        if changes:
            logger.warning("[FIXER] Auto-corrected diagram: %s", "; ".join(changes))
        return result

    @staticmethod
    def _quote_node_label(token: LineToken) -> Optional[str]:
        match = UNQUOTED_NODE_RE.match(token.text)
        if not match:
            return None

        indent = token.raw[: len(token.raw) - len(token.raw.lstrip())]
        suffix = f":::{match.group('cls')}" if match.group("cls") else ""
        label = sanitize(match.group("label"))
        return f'{indent}{match.group("id")}["{label}"]{suffix}'
