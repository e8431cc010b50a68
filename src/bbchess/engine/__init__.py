from .board import Board, Position, STARTPOS_FEN
from .errors import ChessError, FormatError, InvalidMoveError, NotationError
from .move import Move
from .store import BoardStore, StoreFullError, UnknownBoardError
from .types import CastleSide, CastlingRights, Color, PieceKind

__all__ = [
    "Board",
    "BoardStore",
    "CastleSide",
    "CastlingRights",
    "ChessError",
    "Color",
    "FormatError",
    "InvalidMoveError",
    "Move",
    "NotationError",
    "PieceKind",
    "Position",
    "STARTPOS_FEN",
    "StoreFullError",
    "UnknownBoardError",
]
