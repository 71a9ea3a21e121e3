"""
Concept map assembly: free text -> ConceptMap (structured data + diagram).
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, List, Optional

from conceptmap import config
from conceptmap.compiler import compile_concepts
from conceptmap.compiler.render_mermaid import fallback_document
from conceptmap.ir.concept import Concept, load_concepts
from conceptmap.ir.concept_map import (
    ConceptMap,
    ConceptMapConnection,
    ConceptMapMetadata,
    ConceptMapNode,
    NodeData,
)
from conceptmap.pipeline.analyzer import ConceptExtractor

logger = logging.getLogger(__name__)

TITLE_LIMIT = 50
DEFAULT_CONFIDENCE = 0.9


def make_title(text: str) -> str:
    text = text or ""
    if len(text) > TITLE_LIMIT:
        return f"{text[:TITLE_LIMIT]}... (Synopsis)"
    return f"{text} (Synopsis)"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _map_id() -> str:
    return str(int(time.time() * 1000))


# ============================================================
# STRUCTURED DATA
# ============================================================

def build_nodes(concepts: List[Concept]) -> List[ConceptMapNode]:
    nodes = []
    seen = set()
    for concept in concepts:
        key = concept.key
        if key is None or key in seen:
            continue
        seen.add(key)
        nodes.append(
            ConceptMapNode(
                id=key,
                type="main" if concept.type == "main" else "sub",
                data=NodeData(
                    label=concept.text or "",
                    definition=concept.definition or "",
                ),
            )
        )
    return nodes


def build_connections(
    concepts: List[Concept],
    node_ids: set,
    max_connections: Optional[int] = None,
) -> List[ConceptMapConnection]:
    """Same drop rules as the emitter: dangling targets and self-loops go."""
    connections = []
    for concept in concepts:
        source = concept.key
        if source is None or source not in node_ids:
            continue

        outgoing = concept.connections
        if max_connections is not None and max_connections >= 0:
            outgoing = outgoing[:max_connections]

        for connection in outgoing:
            target = (connection.target_id or "").strip()
            if not target or target not in node_ids or target == source:
                continue
            connections.append(
                ConceptMapConnection(
                    id=f"e{source}-{target}",
                    source=source,
                    target=target,
                    label=connection.label or "",
                )
            )
    return connections


def build_concept_map(
    concepts: Any,
    title: str,
    language: str = "en",
    source: str = "LLM Analysis",
    confidence: float = DEFAULT_CONFIDENCE,
    max_connections: Optional[int] = None,
) -> ConceptMap:
    if max_connections is None:
        max_connections = config.MAX_CONNECTIONS_PER_CONCEPT

    emitted = compile_concepts(concepts, max_connections=max_connections)

    loaded, _ = load_concepts(concepts)
    nodes = build_nodes(loaded)
    connections = build_connections(
        loaded,
        {node.id for node in nodes},
        max_connections=max_connections,
    )

    return ConceptMap(
        id=_map_id(),
        title=title,
        nodes=nodes,
        connections=connections,
        metadata=ConceptMapMetadata(
            created_at=_now_iso(),
            confidence=confidence,
            source=source,
            language=language,
        ),
        mermaid_diagram=emitted.diagram,
    )


def error_concept_map() -> ConceptMap:
    return ConceptMap(
        id=_map_id(),
        title="Error generating concept map",
        nodes=[
            ConceptMapNode(
                id="error-node",
                type="main",
                data=NodeData(
                    label="Error generating concept map",
                    definition="Please try again",
                ),
            )
        ],
        connections=[],
        metadata=ConceptMapMetadata(
            created_at=_now_iso(),
            confidence=0,
            source="Error",
            language="en",
        ),
        mermaid_diagram=fallback_document("Please try again"),
    )


def generate_concept_map(
    text: str,
    extractor: Optional[ConceptExtractor] = None,
    max_connections: Optional[int] = None,
) -> ConceptMap:
    """Free text -> ConceptMap. NEVER throws."""
    try:
        extractor = extractor or ConceptExtractor()
        extraction = extractor.extract(text)
        logger.debug("[GENERATOR] Concepts before diagram creation: %r", extraction.concepts)

        return build_concept_map(
            extraction.concepts,
            title=make_title(text),
            language=extraction.language,
            source=extraction.source,
            max_connections=max_connections,
        )
    except Exception:
        logger.exception("[GENERATOR] Error generating concept map")
        return error_concept_map()
