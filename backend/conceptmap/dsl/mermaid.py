"""
Line lexer for the Mermaid flowchart subset emitted and accepted by the service.

Every line of a document becomes exactly one LineToken tagged with its kind:

    HEADER   graph TD / flowchart LR ...
    NODE     id["label"] with an optional :::class suffix
    EDGE     id --> id, id -->|label| id, ...
    STYLE    classDef / class / style / click / linkStyle
    COMMENT  %% ...
    BLANK    whitespace only
    UNKNOWN  anything else

Classification is positional only for the header; everything else is decided
by the line's own shape, in the precedence order listed above.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

VALID_KEYWORDS = ("graph", "flowchart")
VALID_DIRECTIONS = ("TD", "TB", "LR", "RL", "BT")
DEFAULT_HEADER = "graph TD"

STYLE_KEYWORDS = ("classDef", "class", "style", "click", "linkStyle")
# Words the flowchart parser will not accept as bare node ids
RESERVED_IDS = frozenset(VALID_KEYWORDS + STYLE_KEYWORDS + ("end", "subgraph", "direction", "default"))
ARROWS = ("<-->", "-->", "---", "-.->", "-.-", "==>", "===")

IDENTIFIER = r"[A-Za-z][A-Za-z0-9_-]*"
QUOTED = r'"(?:[^"\\]|\\.)*"'
_ARROW = "|".join(re.escape(arrow) for arrow in ARROWS)
_EDGE_LABEL = rf'\|(?:\s*{QUOTED}\s*|[^|"]+)\|'

HEADER_RE = re.compile(
    rf"^(?P<keyword>{'|'.join(VALID_KEYWORDS)})\s+(?P<direction>{'|'.join(VALID_DIRECTIONS)})\s*;?$"
)
HEADER_ATTEMPT_RE = re.compile(
    rf"^(?P<keyword>{'|'.join(VALID_KEYWORDS)})\b\s*(?P<direction>\S*)",
    re.IGNORECASE,
)
NODE_RE = re.compile(
    rf"^(?P<id>{IDENTIFIER})\s*\[\s*(?P<label>{QUOTED})\s*\](?::::(?P<cls>{IDENTIFIER}))?\s*;?$"
)
EDGE_RE = re.compile(
    rf"^(?P<source>{IDENTIFIER})\s*(?P<arrow>{_ARROW})\s*(?:(?P<label>{_EDGE_LABEL})\s*)?(?P<target>{IDENTIFIER})\s*;?$"
)
STYLE_RE = re.compile(rf"^(?P<keyword>{'|'.join(STYLE_KEYWORDS)})\s+\S")

_QUOTED_SPLIT_RE = re.compile(rf"({QUOTED})")
_NON_PRINTABLE_ASCII_RE = re.compile(r"[^\x20-\x7e\t]")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_BOM = "\ufeff"


class LineKind(Enum):
    HEADER = "header"
    NODE = "node"
    EDGE = "edge"
    STYLE = "style"
    COMMENT = "comment"
    BLANK = "blank"
    UNKNOWN = "unknown"


@dataclass
class LineToken:
    line_no: int                  # 1-based, relative to the input text
    kind: LineKind
    raw: str                      # restricted line, original indentation kept
    text: str                     # raw.strip()
    node_id: Optional[str] = None
    label: Optional[str] = None   # as written, quotes/pipes included
    source: Optional[str] = None
    target: Optional[str] = None


# ============================================================
# NORMALIZATION
# ============================================================

def split_lines(text: str) -> List[str]:
    """Strip a leading BOM and split on any line ending."""
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def restrict_charset(line: str) -> str:
    """
    Keep printable ASCII outside quoted labels.

    Quoted labels are produced by the sanitizer and may legitimately carry
    Unicode, so inside them only control characters are removed.
    """
    parts = _QUOTED_SPLIT_RE.split(line)
    restricted = []
    for index, part in enumerate(parts):
        if index % 2:
            restricted.append(_CONTROL_CHARS_RE.sub("", part))
        else:
            restricted.append(_NON_PRINTABLE_ASCII_RE.sub("", part))
    return "".join(restricted)


# ============================================================
# CLASSIFICATION
# ============================================================

def classify_line(raw: str, line_no: int) -> LineToken:
    text = raw.strip()

    if not text:
        return LineToken(line_no, LineKind.BLANK, raw, text)

    if text.startswith("%%"):
        return LineToken(line_no, LineKind.COMMENT, raw, text)

    if HEADER_RE.match(text):
        return LineToken(line_no, LineKind.HEADER, raw, text)

    match = NODE_RE.match(text)
    if match:
        return LineToken(
            line_no,
            LineKind.NODE,
            raw,
            text,
            node_id=match.group("id"),
            label=match.group("label"),
        )

    match = EDGE_RE.match(text)
    if match:
        return LineToken(
            line_no,
            LineKind.EDGE,
            raw,
            text,
            label=match.group("label"),
            source=match.group("source"),
            target=match.group("target"),
        )

    if STYLE_RE.match(text):
        return LineToken(line_no, LineKind.STYLE, raw, text)

    return LineToken(line_no, LineKind.UNKNOWN, raw, text)


def tokenize(text: str) -> List[LineToken]:
    """One token per input line, in order."""
    return [
        classify_line(restrict_charset(line), line_no)
        for line_no, line in enumerate(split_lines(text), start=1)
    ]


def repair_header(text: str) -> Optional[str]:
    """
    Rebuild a malformed header attempt such as 'Graph td' or 'flowchart XY'.
    Returns None when the line is not a header attempt at all.
    """
    match = HEADER_ATTEMPT_RE.match(text.strip())
    if not match:
        return None

    keyword = match.group("keyword").lower()
    direction = match.group("direction").rstrip(";").upper()
    if direction not in VALID_DIRECTIONS:
        direction = DEFAULT_HEADER.split()[1]
    return f"{keyword} {direction}"
