from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any
from datetime import datetime


class GenerateRequest(BaseModel):
    text: str
    max_connections: Optional[int] = Field(default=None, ge=0)  # Per-concept cap, overrides config


class DiagramRequest(BaseModel):
    """Raw concept data straight from a client; shape is checked by the emitter"""
    concepts: Any = None
    max_connections: Optional[int] = Field(default=None, ge=0)


class ValidateRequest(BaseModel):
    text: str


class BoardCreateRequest(BaseModel):
    name: str
    user_id: Optional[str] = None
    content: Any = None  # Stored opaquely


class BoardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[str] = None
    name: str
    content: Any = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeleteResponse(BaseModel):
    deleted: bool
