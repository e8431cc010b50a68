from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, Optional

from .board import Board, Position
from .move import Move


logger = logging.getLogger(__name__)


class UnknownBoardError(KeyError):
    """No board is registered under the given handle."""


class StoreFullError(RuntimeError):
    """The store already holds its maximum number of boards."""


class BoardStore:
    """Thread-safe registry of boards addressed by opaque handles.

    Responsibilities:
    - Create boards in the start position and hand out unique handles
    - Release boards by handle
    - Run every board operation under the store lock, so concurrent callers
      sharing a handle are serialized
    """

    def __init__(self, max_boards: Optional[int] = None) -> None:
        self._lock = threading.RLock()
        self._boards: Dict[str, Board] = {}
        self.max_boards = max_boards

    def __len__(self) -> int:
        with self._lock:
            return len(self._boards)

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._boards

    def create(self) -> str:
        """Allocate a board in the start position and return its handle."""
        handle = uuid.uuid4().hex
        with self._lock:
            if self.max_boards is not None and len(self._boards) >= self.max_boards:
                raise StoreFullError(f"board limit reached ({self.max_boards})")
            self._boards[handle] = Board.startpos()
        logger.info("board created", extra={"handle": handle})
        return handle

    def destroy(self, handle: str) -> None:
        with self._lock:
            if self._boards.pop(handle, None) is None:
                raise UnknownBoardError(handle)
        logger.info("board destroyed", extra={"handle": handle})

    def reset(self, handle: str) -> None:
        with self._lock:
            self._require(handle).reset()

    def load_from_fen(self, handle: str, fen: str, *, strict: bool = False) -> None:
        with self._lock:
            self._require(handle).load_fen(fen, strict=strict)

    def to_fen(self, handle: str) -> str:
        with self._lock:
            return self._require(handle).to_fen()

    def resolve_san(self, handle: str, san: str) -> Optional[Move]:
        with self._lock:
            return self._require(handle).resolve_san(san)

    def make_move_san(self, handle: str, san: str) -> bool:
        with self._lock:
            return self._require(handle).make_move_san(san)

    def make_move(self, handle: str, move: Move) -> None:
        with self._lock:
            self._require(handle).make_move(move)

    def get_zobrist_key(self, handle: str) -> int:
        with self._lock:
            return self._require(handle).zobrist_key

    def get_position(self, handle: str) -> Position:
        with self._lock:
            return self._require(handle).position()

    def snapshot(self, handle: str) -> Board:
        """Return an independent copy of the board behind ``handle``."""
        with self._lock:
            return self._require(handle).copy()

    def _require(self, handle: str) -> Board:
        board = self._boards.get(handle)
        if board is None:
            raise UnknownBoardError(handle)
        return board
