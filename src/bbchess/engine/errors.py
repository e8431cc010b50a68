from __future__ import annotations


class ChessError(ValueError):
    """Base class for input errors reported by the engine."""


class NotationError(ChessError):
    """A SAN token could not be parsed, or matched zero or several pieces."""


class FormatError(ChessError):
    """A FEN string was rejected by the strict parser."""


class InvalidMoveError(ChessError):
    """A move cannot be applied without corrupting the board.

    Raised before the board is touched, so the position is left intact.
    """
