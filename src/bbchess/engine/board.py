from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import san as san_mod
from .errors import InvalidMoveError, NotationError
from .fen import STARTPOS_FEN, format_fen, parse_fen
from .move import Move
from .types import PROMOTION_KINDS, CastleSide, CastlingRights, Color, PieceKind, piece_slot
from .zobrist import compute_hash


logger = logging.getLogger(__name__)

__all__ = ["Board", "Position", "STARTPOS_FEN"]


# Piece indices for bitboards (slot = color * 6 + kind)
WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK = range(12)

_START_BB = (
    0x000000000000FF00,  # WP
    0x0000000000000042,  # WN
    0x0000000000000024,  # WB
    0x0000000000000081,  # WR
    0x0000000000000008,  # WQ
    0x0000000000000010,  # WK
    0x00FF000000000000,  # BP
    0x4200000000000000,  # BN
    0x2400000000000000,  # BB
    0x8100000000000000,  # BR
    0x0800000000000000,  # BQ
    0x1000000000000000,  # BK
)

# (rook from, rook to) per castle
_CASTLE_ROOK = {
    (Color.WHITE, CastleSide.KINGSIDE): (7, 5),
    (Color.WHITE, CastleSide.QUEENSIDE): (0, 3),
    (Color.BLACK, CastleSide.KINGSIDE): (63, 61),
    (Color.BLACK, CastleSide.QUEENSIDE): (56, 59),
}

# rook home square -> (owner, right lost when that rook leaves)
_ROOK_HOMES = {
    0: (Color.WHITE, CastlingRights.WHITE_QUEENSIDE),
    7: (Color.WHITE, CastlingRights.WHITE_KINGSIDE),
    56: (Color.BLACK, CastlingRights.BLACK_QUEENSIDE),
    63: (Color.BLACK, CastlingRights.BLACK_KINGSIDE),
}


@dataclass(frozen=True)
class Position:
    """Read-only point-in-time view of a board for host consumption."""

    side_to_move: Color
    bitboards: Tuple[int, ...]  # 12 boards in slot order
    white: int
    black: int
    occupied: int
    zobrist_key: int


@dataclass
class Board:
    """Board state with bitboards, SAN resolution, move application and FEN I/O.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - At most one of the 12 bitboards has any given square set.
    - No move history is kept; use :meth:`copy` to snapshot.
    """

    # 12 piece bitboards, indexed by constants above
    bb: List[int]
    side_to_move: Color
    castling: CastlingRights
    ep_square: Optional[int]
    halfmove_clock: int
    fullmove_number: int

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        return cls(
            bb=list(_START_BB),
            side_to_move=Color.WHITE,
            castling=CastlingRights.ALL,
            ep_square=None,
            halfmove_clock=0,
            fullmove_number=1,
        )

    @classmethod
    def from_fen(cls, fen: str, *, strict: bool = False) -> "Board":
        """Create a board from a FEN string.

        Raises:
            FormatError: Only when ``strict`` is set and ``fen`` is malformed.
        """
        board = cls.startpos()
        board.load_fen(fen, strict=strict)
        return board

    def reset(self) -> None:
        """Restore the standard starting position in place."""
        self.bb = list(_START_BB)
        self.side_to_move = Color.WHITE
        self.castling = CastlingRights.ALL
        self.ep_square = None
        self.halfmove_clock = 0
        self.fullmove_number = 1

    def load_fen(self, fen: str, *, strict: bool = False) -> None:
        """Install the position described by ``fen`` in place.

        The string is fully decoded before anything is assigned, so a strict
        parse failure leaves the board untouched. In lenient mode an empty
        string, or a placement without exactly 8 ranks, is ignored.
        """
        fields = parse_fen(fen, strict=strict)
        if fields is None:
            logger.debug("FEN ignored", extra={"fen": fen})
            return
        self.bb = fields.bb
        self.side_to_move = fields.side_to_move
        self.castling = fields.castling
        self.ep_square = fields.ep_square
        self.halfmove_clock = fields.halfmove_clock
        self.fullmove_number = fields.fullmove_number
        logger.debug("loaded FEN", extra={"fen": fen, "strict": strict})

    def to_fen(self) -> str:
        return format_fen(self)

    def copy(self) -> "Board":
        return Board(
            bb=list(self.bb),
            side_to_move=self.side_to_move,
            castling=self.castling,
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )

    # --- Occupancy helpers ---
    def pieces(self, color: Color, kind: PieceKind) -> int:
        return self.bb[piece_slot(color, kind)]

    def occupancy(self, color: Color) -> int:
        base = int(color) * 6
        occ = 0
        for slot in range(base, base + 6):
            occ |= self.bb[slot]
        return occ

    @property
    def occupied(self) -> int:
        occ = 0
        for bb in self.bb:
            occ |= bb
        return occ

    def slot_at(self, sq: int) -> Optional[int]:
        """Return the bitboard slot holding ``sq``, or ``None`` when empty."""
        for slot in range(12):
            if (self.bb[slot] >> sq) & 1:
                return slot
        return None

    def piece_at(self, sq: int) -> Optional[Tuple[Color, PieceKind]]:
        slot = self.slot_at(sq)
        if slot is None:
            return None
        return Color(slot // 6), PieceKind(slot % 6)

    @property
    def zobrist_key(self) -> int:
        return compute_hash(self)

    def position(self) -> Position:
        return Position(
            side_to_move=self.side_to_move,
            bitboards=tuple(self.bb),
            white=self.occupancy(Color.WHITE),
            black=self.occupancy(Color.BLACK),
            occupied=self.occupied,
            zobrist_key=self.zobrist_key,
        )

    # --- SAN ---
    def resolve_san(self, san: str) -> Optional[Move]:
        """Resolve a SAN token for the side to move, or return ``None``."""
        try:
            return san_mod.resolve(self, san)
        except NotationError as e:
            logger.debug("SAN not resolved", extra={"san": san, "reason": str(e)})
            return None

    def make_move_san(self, san: str) -> bool:
        """Resolve and apply ``san``; the board is unchanged when it returns ``False``."""
        move = self.resolve_san(san)
        if move is None:
            return False
        try:
            self.make_move(move)
        except InvalidMoveError as e:
            logger.debug("SAN move rejected", extra={"san": san, "reason": str(e)})
            return False
        return True

    # --- Move application ---
    def make_move(self, move: Move) -> None:
        """Apply ``move`` to this board in-place.

        Supports: normal moves, captures, promotions, en passant, and castling.
        Chess legality (checks, pins, castling through attacked squares) is not
        verified.

        Raises:
            InvalidMoveError: If the move cannot be applied without breaking
                the board invariants. The board is left untouched.
        """
        moved, promotion, castle = self._validate(move)
        side = self.side_to_move
        enemy = side.opposite
        from_bit = 1 << move.from_sq
        to_bit = 1 << move.to_sq

        if castle is not None:
            self.bb[piece_slot(side, PieceKind.KING)] ^= from_bit | to_bit
            rook_from, rook_to = _CASTLE_ROOK[(side, castle)]
            self.bb[piece_slot(side, PieceKind.ROOK)] ^= (1 << rook_from) | (1 << rook_to)
            self.castling &= ~CastlingRights.for_color(side)
            self.ep_square = None
            self._finish_move()
            return

        if move.en_passant:
            self.bb[piece_slot(enemy, PieceKind.PAWN)] &= ~(1 << self._ep_capture_square(move))

        # Remove captured piece
        enemy_base = int(enemy) * 6
        for slot in range(enemy_base, enemy_base + 6):
            self.bb[slot] &= ~to_bit

        self.bb[moved] ^= from_bit
        self.bb[moved] |= to_bit
        kind = PieceKind(moved % 6)

        if promotion is not None:
            self.bb[moved] &= ~to_bit
            self.bb[piece_slot(side, promotion)] |= to_bit

        if kind is PieceKind.PAWN and abs(move.to_sq - move.from_sq) == 16:
            self.ep_square = (move.from_sq + move.to_sq) // 2
        else:
            self.ep_square = None

        if kind is PieceKind.KING:
            self.castling &= ~CastlingRights.for_color(side)
        elif kind is PieceKind.ROOK and move.from_sq in _ROOK_HOMES:
            owner, right = _ROOK_HOMES[move.from_sq]
            if owner is side:
                self.castling &= ~right

        self._finish_move()

    def _finish_move(self) -> None:
        self.side_to_move = self.side_to_move.opposite
        if self.side_to_move is Color.WHITE:
            self.fullmove_number += 1

    def _own_slot_at(self, sq: int) -> Optional[int]:
        base = int(self.side_to_move) * 6
        for slot in range(base, base + 6):
            if (self.bb[slot] >> sq) & 1:
                return slot
        return None

    def _ep_capture_square(self, move: Move) -> int:
        return move.to_sq - 8 if self.side_to_move is Color.WHITE else move.to_sq + 8

    def _validate(self, move: Move) -> Tuple[int, Optional[PieceKind], Optional[CastleSide]]:
        """Check ``move`` against the board without touching it.

        Returns:
            Tuple[int, Optional[PieceKind], Optional[CastleSide]]: The slot of
            the moving piece and the normalized promotion and castle fields.
        """
        side = self.side_to_move
        for sq in (move.from_sq, move.to_sq):
            if not isinstance(sq, int) or not 0 <= sq < 64:
                raise InvalidMoveError(f"square out of range: {sq!r}")
        if move.from_sq == move.to_sq:
            raise InvalidMoveError("from and to squares are identical")
        moved = self._own_slot_at(move.from_sq)
        if moved is None:
            raise InvalidMoveError(f"no {side.name.lower()} piece on square {move.from_sq}")

        castle: Optional[CastleSide] = None
        if move.castle is not None:
            try:
                castle = CastleSide(move.castle)
            except ValueError:
                raise InvalidMoveError(f"invalid castle side: {move.castle!r}") from None
        promotion: Optional[PieceKind] = None
        if move.promotion is not None:
            try:
                promotion = PieceKind(move.promotion)
            except ValueError:
                raise InvalidMoveError(f"invalid promotion piece: {move.promotion!r}") from None

        if castle is not None:
            if promotion is not None or move.en_passant:
                raise InvalidMoveError("castling cannot promote or capture en passant")
            if moved != piece_slot(side, PieceKind.KING):
                raise InvalidMoveError("castling requires the king on the from square")
            if (move.from_sq, move.to_sq) != (
                san_mod.KING_HOME[side],
                san_mod.CASTLE_TARGET[(side, castle)],
            ):
                raise InvalidMoveError("castling squares do not match the castle side")
            rook_from, rook_to = _CASTLE_ROOK[(side, castle)]
            if not (self.pieces(side, PieceKind.ROOK) >> rook_from) & 1:
                raise InvalidMoveError("castling rook is not on its home square")
            if self.occupied & ((1 << move.to_sq) | (1 << rook_to)):
                raise InvalidMoveError("castling destination squares are occupied")
            return moved, None, castle

        if (self.occupancy(side) >> move.to_sq) & 1:
            raise InvalidMoveError(f"square {move.to_sq} holds a piece of the side to move")
        is_pawn = moved % 6 == PieceKind.PAWN
        if promotion is not None and (not is_pawn or promotion not in PROMOTION_KINDS):
            raise InvalidMoveError("only pawns promote, to a knight, bishop, rook or queen")
        if move.en_passant:
            if not is_pawn:
                raise InvalidMoveError("en passant requires a pawn move")
            if not 0 <= self._ep_capture_square(move) < 64:
                raise InvalidMoveError("en passant capture square is off the board")
        return moved, promotion, None
