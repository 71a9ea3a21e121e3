"""
Concept records: the untrusted input of the diagram emitter.

The upstream producer is an LLM, so every field is optional and every value
is coerced or defaulted instead of trusted. Validation here never rejects a
record for having odd values; only the array shape and the presence of an
``id`` or ``text`` key are enforced (see ``load_concepts``).
"""

from collections.abc import Mapping
from typing import Any, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

ConceptType = Literal["main", "sub", "detail"]
CONCEPT_TYPES = ("main", "sub", "detail")


def coerce_text(value: Any) -> Optional[str]:
    """Strings pass through, numbers become strings, anything else is dropped."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return None


class Connection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    target_id: Optional[str] = Field(default=None, alias="targetId")
    label: Optional[str] = None

    @field_validator("target_id", "label", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Optional[str]:
        return coerce_text(value)


class Concept(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    text: Optional[str] = None
    definition: Optional[str] = None
    type: Optional[ConceptType] = None
    connections: List[Connection] = Field(default_factory=list)

    @field_validator("id", "text", "definition", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Optional[str]:
        return coerce_text(value)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Optional[str]:
        if isinstance(value, str) and value.strip().lower() in CONCEPT_TYPES:
            return value.strip().lower()
        return None

    @field_validator("connections", mode="before")
    @classmethod
    def _coerce_connections(cls, value: Any) -> List[Any]:
        if not isinstance(value, (list, tuple)):
            return []

        connections = []
        for item in value:
            if isinstance(item, Mapping):
                connections.append(dict(item))
            elif isinstance(item, Connection):
                connections.append(item)
            elif coerce_text(item) is not None:
                # Bare target reference, e.g. ["concept2", "concept3"]
                connections.append({"targetId": coerce_text(item)})
        return connections

    @property
    def key(self) -> Optional[str]:
        """Identifier used to resolve connections, None when unusable."""
        if self.id is None or not self.id.strip():
            return None
        return self.id.strip()

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())


def load_concepts(data: Any) -> Tuple[List[Concept], Optional[str]]:
    """
    Validate the concept array at the trust boundary.

    Returns (concepts, None) on success or ([], error message) when the shape
    is malformed. NEVER throws.
    """
    if not isinstance(data, (list, tuple)):
        return [], "Malformed concept data: expected an array of concept objects"

    concepts: List[Concept] = []
    for index, item in enumerate(data):
        if isinstance(item, Concept):
            concepts.append(item)
            continue

        if not isinstance(item, Mapping):
            return [], f"Malformed concept data: item {index} is not an object"

        if "id" not in item and "text" not in item:
            return [], f"Malformed concept data: item {index} has neither 'id' nor 'text'"

        try:
            concepts.append(Concept.model_validate(dict(item)))
        except ValidationError as e:
            return [], f"Malformed concept data: item {index} is invalid ({e.error_count()} errors)"

    return concepts, None
