import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from conceptmap import config
from conceptmap.compiler import compile_concepts
from conceptmap.db.boards import BoardRepository
from conceptmap.db.session import get_db
from conceptmap.ir.concept_map import ConceptMap
from conceptmap.pipeline.analyzer import ConceptExtractor
from conceptmap.pipeline.generator import generate_concept_map
from conceptmap.schemas import (
    BoardCreateRequest,
    BoardResponse,
    DeleteResponse,
    DiagramRequest,
    GenerateRequest,
    ValidateRequest,
)
from conceptmap.validation import validate

logger = logging.getLogger(__name__)

router = APIRouter()


def get_extractor() -> ConceptExtractor:
    return ConceptExtractor()


def _cap(requested: Optional[int]) -> Optional[int]:
    return requested if requested is not None else config.MAX_CONNECTIONS_PER_CONCEPT


# ============================
# CONCEPT MAPS
# ============================

@router.post("/generate", response_model=ConceptMap)
def generate(request: GenerateRequest, extractor: ConceptExtractor = Depends(get_extractor)):
    logger.info("[API] /generate text_length=%d", len(request.text))
    return generate_concept_map(
        request.text,
        extractor=extractor,
        max_connections=_cap(request.max_connections),
    )


@router.post("/diagram")
def diagram(request: DiagramRequest):
    result = compile_concepts(request.concepts, max_connections=_cap(request.max_connections))
    if result.fallback:
        logger.warning("[API] /diagram returned fallback document: %s", result.error)
    return result.to_dict()


@router.post("/validate")
def validate_text(request: ValidateRequest):
    return validate(request.text).to_dict()


# ============================
# BOARDS
# ============================

@router.post("/boards", response_model=BoardResponse)
def create_board(request: BoardCreateRequest, db: Session = Depends(get_db)):
    try:
        return BoardRepository(db).create(
            request.name,
            content=request.content,
            user_id=request.user_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/boards", response_model=List[BoardResponse])
def list_boards(user_id: Optional[str] = None, db: Session = Depends(get_db)):
    return BoardRepository(db).list_for_user(user_id)


@router.get("/boards/{board_id}", response_model=BoardResponse)
def get_board(board_id: int, db: Session = Depends(get_db)):
    board = BoardRepository(db).get(board_id)
    if board is None:
        raise HTTPException(status_code=404, detail="Board not found")
    return board


@router.delete("/boards/{board_id}", response_model=DeleteResponse)
def delete_board(board_id: int, db: Session = Depends(get_db)):
    return {"deleted": BoardRepository(db).delete(board_id)}
