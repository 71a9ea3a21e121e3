#backend\conceptmap\compiler\compiler.py

import logging
from typing import Any, Optional

from conceptmap import config
from conceptmap.compiler.normalize import normalize_concepts
from conceptmap.compiler.render_mermaid import (
    error_document,
    fallback_document,
    render_mermaid,
)
from conceptmap.compiler.types import EmitResult
from conceptmap.dsl.mermaid import VALID_DIRECTIONS
from conceptmap.ir.concept import load_concepts
from conceptmap.validation.diagram_validator import DiagramValidator

logger = logging.getLogger(__name__)


# ============================================================
# Diagram Emitter
# ============================================================

class DiagramEmitter:
    """
    Deterministic concept array -> Mermaid document.
    No inference. No LLM usage. NEVER throws.

    Every returned document is either:
    - the rendered diagram (validated)
    - the validator's auto-corrected version of it (re-validated)
    - an error / fallback document
    """

    def __init__(
        self,
        direction: Optional[str] = None,
        max_connections: Optional[int] = None,
        validator: Optional[DiagramValidator] = None,
    ):
        direction = (direction or config.DIAGRAM_DIRECTION).upper()
        if direction not in VALID_DIRECTIONS:
            direction = "TD"
        self.header = f"graph {direction}"
        self.max_connections = max_connections
        self.validator = validator or DiagramValidator()

    def build(self, concepts: Any) -> EmitResult:
        try:
            return self._build(concepts)
        except Exception:
            logger.exception("[EMITTER] Unexpected failure while building diagram")
            return EmitResult(
                diagram=fallback_document("Error creating diagram", header=self.header),
                fallback=True,
                error="Error creating diagram",
            )

    def emit(self, concepts: Any) -> str:
        return self.build(concepts).diagram

    # ---------- internals ----------

    def _build(self, concepts: Any) -> EmitResult:
        loaded, error = load_concepts(concepts)
        if error:
            logger.warning("[EMITTER] %s", error)
            return EmitResult(
                diagram=error_document(error, header=self.header),
                fallback=True,
                error=error,
            )

        nodes, edges = normalize_concepts(loaded, max_connections=self.max_connections)
        if not nodes:
            logger.warning("[EMITTER] No valid concepts available")
            return EmitResult(
                diagram=fallback_document("No valid concepts available", header=self.header),
                fallback=True,
                error="No valid concepts available",
            )

        diagram = render_mermaid(nodes, edges, header=self.header)

        # ---------- self-check ----------
        validation = self.validator.validate(diagram)
        if validation.valid:
            return EmitResult(diagram=diagram, nodes=nodes, edges=edges, validation=validation)

        if validation.sanitized_text:
            recheck = self.validator.validate(validation.sanitized_text)
            if recheck.valid:
                logger.warning(
                    "[EMITTER] Using auto-corrected diagram: %s",
                    "; ".join(validation.corrections),
                )
                return EmitResult(
                    diagram=validation.sanitized_text,
                    nodes=nodes,
                    edges=edges,
                    corrected=True,
                    validation=recheck,
                )

        reason = validation.errors[0].message if validation.errors else "Syntax issues"
        logger.warning(
            "[EMITTER] Diagram failed validation, returning fallback: %s",
            "; ".join(e.message for e in validation.errors),
        )
        return EmitResult(
            diagram=fallback_document(reason, header=self.header),
            nodes=nodes,
            edges=edges,
            fallback=True,
            error=reason,
            validation=validation,
        )


def emit(
    concepts: Any,
    direction: Optional[str] = None,
    max_connections: Optional[int] = None,
) -> str:
    """Convenience function: concept array -> diagram text."""
    if max_connections is None:
        max_connections = config.MAX_CONNECTIONS_PER_CONCEPT
    return DiagramEmitter(direction=direction, max_connections=max_connections).emit(concepts)


def compile_concepts(
    concepts: Any,
    direction: Optional[str] = None,
    max_connections: Optional[int] = None,
) -> EmitResult:
    """Like emit(), but also returns the derived nodes, edges and validation."""
    if max_connections is None:
        max_connections = config.MAX_CONNECTIONS_PER_CONCEPT
    return DiagramEmitter(direction=direction, max_connections=max_connections).build(concepts)
