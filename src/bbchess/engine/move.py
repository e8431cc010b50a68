from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .types import CastleSide, PieceKind, PROMOTION_KINDS


@dataclass(frozen=True)
class Move:
    """A concrete move, either resolved from SAN or built by the caller.

    Attributes:
        from_sq (int): Origin square index (a1=0 .. h8=63).
        to_sq (int): Destination square index.
        promotion (Optional[PieceKind]): Promoted piece kind, if any.
        castle (Optional[CastleSide]): Set for castling moves; the applier
            then moves the rook as well.
        en_passant (bool): Capture of the pawn beside the destination.
    """

    from_sq: int
    to_sq: int
    promotion: Optional[PieceKind] = None
    castle: Optional[CastleSide] = None
    en_passant: bool = False

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form, e.g. ``"e7e8q"``."""
        promo = self.promotion.letter.lower() if self.promotion is not None else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo


def parse_promotion(ch: Optional[str]) -> Optional[PieceKind]:
    """Map a promotion letter (``n``, ``b``, ``r``, ``q``, either case) to a kind.

    Raises:
        ValueError: If ``ch`` is not a promotion piece.
    """
    if ch is None or ch == "":
        return None
    kind = PieceKind.from_letter(ch)
    if kind not in PROMOTION_KINDS:
        raise ValueError(f"invalid promotion piece: {ch!r}")
    return kind


def parse_castle(ch: Optional[str]) -> Optional[CastleSide]:
    """Map ``"K"``/``"Q"`` (either case) to a castle side."""
    if ch is None or ch == "":
        return None
    if ch.upper() == "K":
        return CastleSide.KINGSIDE
    if ch.upper() == "Q":
        return CastleSide.QUEENSIDE
    raise ValueError(f"invalid castle side: {ch!r}")


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(rank + 1)
