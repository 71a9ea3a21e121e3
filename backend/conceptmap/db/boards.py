"""
Board persistence: saved concept maps per user.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from conceptmap.db.models import Board

logger = logging.getLogger(__name__)


class BoardRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, content: Any = None, user_id: Optional[str] = None) -> Board:
        name = (name or "").strip()
        if not name:
            raise ValueError("Board name is required")

        board = Board(user_id=user_id, name=name, content=content)
        self.db.add(board)
        self.db.commit()
        self.db.refresh(board)
        logger.info("[BOARDS] Created board id=%s user=%s", board.id, user_id)
        return board

    def get(self, board_id: int) -> Optional[Board]:
        return self.db.get(Board, board_id)

    def list_for_user(self, user_id: Optional[str] = None) -> List[Board]:
        """Newest first. Without a user id every board is listed."""
        query = select(Board)
        if user_id is not None:
            query = query.where(Board.user_id == user_id)
        query = query.order_by(Board.created_at.desc(), Board.id.desc())
        return list(self.db.scalars(query))

    def delete(self, board_id: int) -> bool:
        board = self.get(board_id)
        if board is None:
            return False
        self.db.delete(board)
        self.db.commit()
        logger.info("[BOARDS] Deleted board id=%s", board_id)
        return True
