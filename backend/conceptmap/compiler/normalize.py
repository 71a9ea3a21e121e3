import re
from typing import Dict, List, Optional, Set, Tuple

from conceptmap.compiler.types import ProcessedEdge, ProcessedNode
from conceptmap.dsl.mermaid import RESERVED_IDS
from conceptmap.dsl.sanitizer import sanitize, sanitize_or_default
from conceptmap.ir.concept import Concept

DEFAULT_RELATION = "relates to"

_UNSAFE_ID_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")
_LEADING_LETTER_RE = re.compile(r"^[A-Za-z]")


# -------------------------
# Identifiers
# -------------------------

def derive_safe_id(raw_id: Optional[str]) -> str:
    """
    Map a raw concept id onto the grammar's identifier shape.
    Deterministic; uniqueness is handled by the caller.
    """
    if not raw_id:
        return "node"
    safe = _UNSAFE_ID_CHARS_RE.sub("_", raw_id)
    if not _LEADING_LETTER_RE.match(safe):
        safe = f"node_{safe}"
    elif safe in RESERVED_IDS:
        safe = f"{safe}_"
    return safe


def unique_id(base: str, used: Set[str]) -> str:
    """First occurrence keeps base, later ones get _1, _2, ..."""
    if base not in used:
        return base
    counter = 1
    while f"{base}_{counter}" in used:
        counter += 1
    return f"{base}_{counter}"


# -------------------------
# Nodes
# -------------------------

def normalize_nodes(concepts: List[Concept]) -> List[Tuple[Concept, ProcessedNode]]:
    """
    One node per concept with a usable id or usable text, in input order.
    Concepts with neither are skipped.
    """
    used: Set[str] = set()
    pairs: List[Tuple[Concept, ProcessedNode]] = []

    for concept in concepts:
        if concept.key is None and not concept.has_text:
            continue

        safe_id = unique_id(derive_safe_id(concept.key), used)
        used.add(safe_id)

        pairs.append((
            concept,
            ProcessedNode(
                safe_id=safe_id,
                display_text=sanitize(concept.text),
                original_id=concept.key,
            ),
        ))

    return pairs


# -------------------------
# Edges
# -------------------------

def normalize_edges(
    pairs: List[Tuple[Concept, ProcessedNode]],
    max_connections: Optional[int] = None,
) -> List[ProcessedEdge]:
    """
    Resolve connections against the emitted nodes.

    Dangling targets and self-loops are dropped silently. Duplicate edges are
    kept; deduplication is the producer's job. A negative cap means no cap.
    """
    # raw id -> safe id, first occurrence wins
    id_map: Dict[str, str] = {}
    for _, node in pairs:
        if node.original_id is not None:
            id_map.setdefault(node.original_id, node.safe_id)

    edges: List[ProcessedEdge] = []
    for concept, node in pairs:
        connections = concept.connections
        if max_connections is not None and max_connections >= 0:
            connections = connections[:max_connections]

        for connection in connections:
            target_key = (connection.target_id or "").strip()
            target = id_map.get(target_key)
            if target is None or target == node.safe_id:
                continue

            edges.append(
                ProcessedEdge(
                    from_safe_id=node.safe_id,
                    to_safe_id=target,
                    safe_label=sanitize_or_default(connection.label, DEFAULT_RELATION),
                )
            )

    return edges


def normalize_concepts(
    concepts: List[Concept],
    max_connections: Optional[int] = None,
) -> Tuple[List[ProcessedNode], List[ProcessedEdge]]:
    pairs = normalize_nodes(concepts)
    edges = normalize_edges(pairs, max_connections=max_connections)
    return [node for _, node in pairs], edges
