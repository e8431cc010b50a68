from __future__ import annotations

from enum import IntEnum, IntFlag


class Color(IntEnum):
    """Side color. Values index the per-color halves of the bitboard list."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> "Color":
        return Color(1 - self.value)

    @property
    def fen_char(self) -> str:
        return "w" if self is Color.WHITE else "b"


class PieceKind(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5

    @property
    def letter(self) -> str:
        """Uppercase letter used in FEN and SAN."""
        return _KIND_LETTERS[self]

    @classmethod
    def from_letter(cls, ch: str) -> "PieceKind":
        """Return the kind for a FEN/SAN letter (either case).

        Raises:
            ValueError: If ``ch`` names no piece kind.
        """
        try:
            return _LETTER_KINDS[ch.upper()]
        except KeyError:
            raise ValueError(f"invalid piece letter: {ch!r}") from None


_KIND_LETTERS = {
    PieceKind.PAWN: "P",
    PieceKind.KNIGHT: "N",
    PieceKind.BISHOP: "B",
    PieceKind.ROOK: "R",
    PieceKind.QUEEN: "Q",
    PieceKind.KING: "K",
}
_LETTER_KINDS = {v: k for k, v in _KIND_LETTERS.items()}

PROMOTION_KINDS = (PieceKind.KNIGHT, PieceKind.BISHOP, PieceKind.ROOK, PieceKind.QUEEN)


class CastleSide(IntEnum):
    KINGSIDE = 0
    QUEENSIDE = 1


class CastlingRights(IntFlag):
    """Four independent castling permissions.

    Iteration order of the single flags (K, Q, k, q) is the canonical order
    used by FEN and by the Zobrist castling keys.
    """

    NONE = 0
    WHITE_KINGSIDE = 1
    WHITE_QUEENSIDE = 2
    BLACK_KINGSIDE = 4
    BLACK_QUEENSIDE = 8

    WHITE_BOTH = WHITE_KINGSIDE | WHITE_QUEENSIDE
    BLACK_BOTH = BLACK_KINGSIDE | BLACK_QUEENSIDE
    ALL = WHITE_BOTH | BLACK_BOTH

    @classmethod
    def for_color(cls, color: Color) -> "CastlingRights":
        return cls.WHITE_BOTH if color is Color.WHITE else cls.BLACK_BOTH


# (flag, FEN letter) in canonical K, Q, k, q order
CASTLING_ORDER = (
    (CastlingRights.WHITE_KINGSIDE, "K"),
    (CastlingRights.WHITE_QUEENSIDE, "Q"),
    (CastlingRights.BLACK_KINGSIDE, "k"),
    (CastlingRights.BLACK_QUEENSIDE, "q"),
)


def piece_slot(color: Color, kind: PieceKind) -> int:
    """Index into the 12 bitboards: white pawn 0 .. white king 5, black pawn 6 .. black king 11."""
    return int(color) * 6 + int(kind)


def slot_kind(slot: int) -> PieceKind:
    return PieceKind(slot % 6)


def slot_char(slot: int) -> str:
    """FEN character for a piece slot: uppercase for White, lowercase for Black."""
    letter = slot_kind(slot).letter
    return letter if slot < 6 else letter.lower()


def char_slot(ch: str) -> int:
    """Piece slot for a FEN character.

    Raises:
        ValueError: If ``ch`` is not one of ``PNBRQKpnbrqk``.
    """
    kind = PieceKind.from_letter(ch)
    return piece_slot(Color.WHITE if ch.isupper() else Color.BLACK, kind)
