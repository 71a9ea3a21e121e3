# backend/conceptmap/compiler/render_mermaid.py

from typing import List

from conceptmap.compiler.types import ProcessedEdge, ProcessedNode
from conceptmap.dsl.mermaid import DEFAULT_HEADER
from conceptmap.dsl.sanitizer import sanitize

# Cosmetic only: first node is the accent, the rest rotate by index % 3
ACCENT_CLASS = "accent"
ROTATING_CLASSES = ("pastel-pink", "pastel-blue", "pastel-green")

CLASS_DEFS = {
    "accent": "fill:#e0e7ff,stroke:#6366f1,stroke-width:2.5px,color:#222,font-weight:bold",
    "pastel-blue": "fill:#dbeafe,stroke:#60a5fa,stroke-width:2px,color:#222",
    "pastel-green": "fill:#d1fae5,stroke:#34d399,stroke-width:2px,color:#222",
    "pastel-pink": "fill:#fce7f3,stroke:#f472b6,stroke-width:2px,color:#222",
}

FALLBACK_TITLE = "Could not render concept map due to syntax issues"
FALLBACK_DETAIL = "Please try again with different input"


def node_class(index: int) -> str:
    if index == 0:
        return ACCENT_CLASS
    return ROTATING_CLASSES[index % 3]


def render_mermaid(
    nodes: List[ProcessedNode],
    edges: List[ProcessedEdge],
    header: str = DEFAULT_HEADER,
) -> str:
    lines = [header]

    # -------------------------
    # Nodes
    # -------------------------
    used_classes = set()
    for index, node in enumerate(nodes):
        node.style_class = node_class(index)
        used_classes.add(node.style_class)
        lines.append(f'{node.safe_id}["{node.display_text}"]:::{node.style_class}')

    # -------------------------
    # Edges
    # -------------------------
    for edge in edges:
        lines.append(f'{edge.from_safe_id} -->|"{edge.safe_label}"| {edge.to_safe_id}')

    # -------------------------
    # Style trailer (must follow a blank line)
    # -------------------------
    lines.append("")
    for name, style in CLASS_DEFS.items():
        if name in used_classes:
            lines.append(f"classDef {name} {style}")

    return "\n".join(lines)


def error_document(message: str, header: str = DEFAULT_HEADER) -> str:
    """Single-node document naming an input problem."""
    return f'{header}\nErrorNode["{sanitize(message)}"]'


def fallback_document(detail: str = FALLBACK_DETAIL, header: str = DEFAULT_HEADER) -> str:
    """Two-node document that always passes validation."""
    return "\n".join([
        header,
        f'ErrorNode["{sanitize(FALLBACK_TITLE)}"]',
        f'DetailNode["{sanitize(detail)}"]',
        "ErrorNode --> DetailNode",
    ])
