"""SAN (Standard Algebraic Notation) parsing and resolution against a board.

Resolution checks that exactly one piece of the side to move can reach the
destination (after disambiguation). It does not check chess legality: pins,
checks and castling conditions are the caller's business.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .errors import NotationError
from .move import Move
from .tables import AttackTables, bishop_attacks, get_attack_tables, queen_attacks, rook_attacks
from .types import CastleSide, Color, PieceKind

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


_SAN_PIECES = {
    "N": PieceKind.KNIGHT,
    "B": PieceKind.BISHOP,
    "R": PieceKind.ROOK,
    "Q": PieceKind.QUEEN,
    "K": PieceKind.KING,
}
_SAN_PROMOTIONS = {
    "N": PieceKind.KNIGHT,
    "B": PieceKind.BISHOP,
    "R": PieceKind.ROOK,
    "Q": PieceKind.QUEEN,
}

KING_HOME = {Color.WHITE: 4, Color.BLACK: 60}
CASTLE_TARGET = {
    (Color.WHITE, CastleSide.KINGSIDE): 6,
    (Color.WHITE, CastleSide.QUEENSIDE): 2,
    (Color.BLACK, CastleSide.KINGSIDE): 62,
    (Color.BLACK, CastleSide.QUEENSIDE): 58,
}


@dataclass(frozen=True)
class SanToken:
    """Board-independent fields of a SAN token."""

    piece: PieceKind
    to_sq: int = -1
    disamb_file: Optional[int] = None
    disamb_rank: Optional[int] = None
    promotion: Optional[PieceKind] = None
    castle: Optional[CastleSide] = None


def _is_file(ch: str) -> bool:
    return "a" <= ch <= "h"


def _is_rank(ch: str) -> bool:
    return "1" <= ch <= "8"


def parse_san(san: str) -> SanToken:
    """Split a SAN token into piece, destination, disambiguators and promotion.

    Raises:
        NotationError: If the token is not a string, is too short, has no valid destination
            square, or carries characters that are neither a piece letter nor
            a disambiguator. Check and annotation suffixes (``+``, ``#``,
            ``!``, ``?``) are not accepted.
    """
    if not isinstance(san, str):
        raise NotationError(f"SAN token must be a string, got {type(san).__name__}")
    s = san.lstrip()
    if s == "O-O-O":
        return SanToken(piece=PieceKind.KING, castle=CastleSide.QUEENSIDE)
    if s == "O-O":
        return SanToken(piece=PieceKind.KING, castle=CastleSide.KINGSIDE)
    if len(s) < 2:
        raise NotationError(f"SAN token too short: {san!r}")

    promotion: Optional[PieceKind] = None
    if len(s) >= 4 and s[-2] == "=" and s[-1] in _SAN_PROMOTIONS:
        promotion = _SAN_PROMOTIONS[s[-1]]
        dest, prefix = s[-4:-2], s[:-4]
    else:
        dest, prefix = s[-2:], s[:-2]
    if not (_is_file(dest[0]) and _is_rank(dest[1])):
        raise NotationError(f"invalid destination square in {san!r}")
    to_sq = (ord(dest[1]) - ord("1")) * 8 + (ord(dest[0]) - ord("a"))

    prefix = prefix.rstrip("x")
    piece = PieceKind.PAWN
    if prefix and prefix[0] in _SAN_PIECES:
        piece = _SAN_PIECES[prefix[0]]
        prefix = prefix[1:]

    disamb_file: Optional[int] = None
    disamb_rank: Optional[int] = None
    if len(prefix) == 1:
        if _is_file(prefix):
            disamb_file = ord(prefix) - ord("a")
        elif _is_rank(prefix):
            disamb_rank = ord(prefix) - ord("1")
        else:
            raise NotationError(f"unexpected {prefix!r} in {san!r}")
    elif len(prefix) == 2:
        if not (_is_file(prefix[0]) and _is_rank(prefix[1])):
            raise NotationError(f"unexpected {prefix!r} in {san!r}")
        disamb_file = ord(prefix[0]) - ord("a")
        disamb_rank = ord(prefix[1]) - ord("1")
    elif prefix:
        raise NotationError(f"unexpected {prefix!r} in {san!r}")

    if promotion is not None and piece is not PieceKind.PAWN:
        raise NotationError(f"only pawns promote: {san!r}")

    return SanToken(
        piece=piece,
        to_sq=to_sq,
        disamb_file=disamb_file,
        disamb_rank=disamb_rank,
        promotion=promotion,
    )


def resolve(board: "Board", san: str, tables: Optional[AttackTables] = None) -> Move:
    """Resolve ``san`` into a concrete move for the side to move on ``board``.

    Args:
        board (Board): Position to resolve against; it is not modified.
        san (str): SAN token such as ``"Nbd7"``, ``"exd6"``, ``"e8=Q"``, ``"O-O"``.
        tables (Optional[AttackTables]): Attack tables; the shared ones by default.

    Returns:
        Move: The single matching move. ``en_passant`` is set for a pawn
        capture written onto an empty square.

    Raises:
        NotationError: If the token is malformed, or if zero or several
            pieces match after disambiguation.
    """
    tok = parse_san(san)
    side = board.side_to_move

    if tok.castle is not None:
        return Move(KING_HOME[side], CASTLE_TARGET[(side, tok.castle)], castle=tok.castle)

    t = tables if tables is not None else get_attack_tables()
    occ = board.occupied
    to_sq = tok.to_sq
    own = board.pieces(side, tok.piece)

    if tok.piece is PieceKind.KING:
        candidates = t.king[to_sq] & own
    elif tok.piece is PieceKind.KNIGHT:
        candidates = t.knight[to_sq] & own
    elif tok.piece is PieceKind.ROOK:
        candidates = rook_attacks(to_sq, occ) & own
    elif tok.piece is PieceKind.BISHOP:
        candidates = bishop_attacks(to_sq, occ) & own
    elif tok.piece is PieceKind.QUEEN:
        candidates = queen_attacks(to_sq, occ) & own
    elif tok.disamb_file is not None:
        candidates = t.pawn_capture_sources(to_sq, side) & own
    else:
        candidates = _pawn_push_source(to_sq, side, own, occ)

    if tok.disamb_file is not None:
        candidates &= t.files[tok.disamb_file]
    if tok.disamb_rank is not None:
        candidates &= t.ranks[tok.disamb_rank]

    if candidates == 0:
        raise NotationError(f"no {tok.piece.name.lower()} can reach the destination of {san!r}")
    if candidates & (candidates - 1):
        raise NotationError(f"ambiguous SAN {san!r}")
    from_sq = candidates.bit_length() - 1

    en_passant = (
        tok.piece is PieceKind.PAWN
        and tok.disamb_file is not None
        and not (occ >> to_sq) & 1
    )
    return Move(from_sq, to_sq, promotion=tok.promotion, en_passant=en_passant)


def _pawn_push_source(to_sq: int, side: Color, pawns: int, occ: int) -> int:
    step = 8 if side is Color.WHITE else -8
    one_back = to_sq - step
    if not 0 <= one_back < 64:
        return 0
    if (pawns >> one_back) & 1:
        return 1 << one_back
    double_push_rank = 3 if side is Color.WHITE else 4
    two_back = one_back - step
    if (
        to_sq // 8 == double_push_rank
        and (pawns >> two_back) & 1
        and not (occ >> one_back) & 1
    ):
        return 1 << two_back
    return 0
