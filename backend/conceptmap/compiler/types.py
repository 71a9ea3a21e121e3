from dataclasses import dataclass, field
from typing import List, Optional

from conceptmap.validation.diagram_validator import ValidationResult


@dataclass
class ProcessedNode:
    safe_id: str
    display_text: str       # sanitized, ready to sit between quotes
    original_id: Optional[str]
    style_class: str = ""


@dataclass
class ProcessedEdge:
    from_safe_id: str
    to_safe_id: str
    safe_label: str


@dataclass
class EmitResult:
    diagram: str
    nodes: List[ProcessedNode] = field(default_factory=list)
    edges: List[ProcessedEdge] = field(default_factory=list)
    fallback: bool = False   # diagram is an error/fallback document
    corrected: bool = False  # diagram is the validator's auto-corrected text
    error: Optional[str] = None
    validation: Optional[ValidationResult] = None

    def to_dict(self) -> dict:
        return {
            "diagram": self.diagram,
            "nodes": [
                {
                    "id": n.safe_id,
                    "label": n.display_text,
                    "original_id": n.original_id,
                    "class": n.style_class,
                }
                for n in self.nodes
            ],
            "edges": [
                {
                    "source": e.from_safe_id,
                    "target": e.to_safe_id,
                    "label": e.safe_label,
                }
                for e in self.edges
            ],
            "fallback": self.fallback,
            "corrected": self.corrected,
            "error": self.error,
            "validation": self.validation.to_dict() if self.validation else None,
        }
