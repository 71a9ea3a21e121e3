from pydantic import BaseModel, Field
from typing import List, Literal


class NodeData(BaseModel):
    label: str
    definition: str = ""


class NodePosition(BaseModel):
    # Layout is left to the renderer
    x: float = 0
    y: float = 0


class ConceptMapNode(BaseModel):
    id: str
    type: Literal["main", "sub"] = "sub"
    data: NodeData
    position: NodePosition = Field(default_factory=NodePosition)


class ConceptMapConnection(BaseModel):
    id: str
    source: str
    target: str
    label: str = ""


class ConceptMapMetadata(BaseModel):
    created_at: str
    confidence: float
    source: str
    language: str = "en"


class ConceptMap(BaseModel):
    id: str
    title: str
    nodes: List[ConceptMapNode] = Field(default_factory=list)
    connections: List[ConceptMapConnection] = Field(default_factory=list)
    metadata: ConceptMapMetadata
    mermaid_diagram: str
