"""
Label sanitizer for quoted Mermaid tokens.

Turns arbitrary text (LLM output, user input, HTML fragments) into a string
that can sit between the double quotes of a node or edge label without
breaking the grammar, while keeping as much of the original meaning as
possible: accents, symbols and emoji pass through, structural characters are
swapped for look-alikes instead of being deleted.
"""

import logging
import re
import unicodedata
from typing import Any

logger = logging.getLogger(__name__)

PLACEHOLDER = "Content"
MAX_LABEL_LENGTH = 200
ELLIPSIS = "..."

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
# C0 controls except TAB (0x09) and LF (0x0A, already collapsed), plus DEL
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

# Characters the grammar treats as structure outside of quotes
STRUCTURAL_REPLACEMENTS = str.maketrans({
    "[": "(",
    "{": "(",
    "]": ")",
    "}": ")",
    "|": "I",
    "<": "(",
    ">": ")",
})


def _truncate(text: str) -> str:
    if len(text) <= MAX_LABEL_LENGTH:
        return text

    head = text[: MAX_LABEL_LENGTH - len(ELLIPSIS)]

    # Never cut an escape sequence in half
    trailing = len(head) - len(head.rstrip("\\"))
    if trailing % 2 == 1:
        head = head[:-1]

    return head + ELLIPSIS


def sanitize(text: Any) -> str:
    """
    Make text safe for a quoted Mermaid label.

    - None / non-strings are treated as empty
    - NFC normalization
    - CR, LF and CRLF become a single space
    - backslash escaped first, then double quote
    - control characters removed (tab kept)
    - [ ] { } | < > replaced with look-alikes
    - blank results become the placeholder
    - long results are truncated with an ellipsis

    Pure and deterministic. NEVER throws.
    """
    original = text if isinstance(text, str) else ""

    result = unicodedata.normalize("NFC", original)
    result = _LINE_BREAK_RE.sub(" ", result)
    result = result.replace("\\", "\\\\")
    result = result.replace('"', '\\"')
    result = _CONTROL_CHARS_RE.sub("", result)
    result = result.translate(STRUCTURAL_REPLACEMENTS)
    result = result.strip()

    if not result:
        result = PLACEHOLDER
    else:
        result = _truncate(result)

    if result != original:
        logger.debug(
            "[SANITIZE] Modified label: original=%r sanitized=%r",
            original,
            result,
        )

    return result


def sanitize_or_default(text: Any, default: str) -> str:
    """Sanitize text, using default when the input is missing or blank."""
    if not isinstance(text, str) or not text.strip():
        return sanitize(default)
    return sanitize(text)
