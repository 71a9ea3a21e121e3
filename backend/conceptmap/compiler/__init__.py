from conceptmap.compiler.compiler import DiagramEmitter, compile_concepts, emit
from conceptmap.compiler.types import EmitResult, ProcessedEdge, ProcessedNode

__all__ = [
    "DiagramEmitter",
    "EmitResult",
    "ProcessedEdge",
    "ProcessedNode",
    "compile_concepts",
    "emit",
]
