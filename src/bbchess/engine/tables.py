from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Color


MASK64 = 0xFFFFFFFFFFFFFFFF

KNIGHT_OFFSETS = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
KING_OFFSETS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))
ROOK_DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))
BISHOP_DIRECTIONS = ((1, 1), (-1, 1), (1, -1), (-1, -1))


def _on_board(f: int, r: int) -> bool:
    return 0 <= f < 8 and 0 <= r < 8


def _offset_mask(sq: int, offsets: Tuple[Tuple[int, int], ...]) -> int:
    f, r = sq % 8, sq // 8
    bb = 0
    for df, dr in offsets:
        nf, nr = f + df, r + dr
        if _on_board(nf, nr):
            bb |= 1 << (nr * 8 + nf)
    return bb


@dataclass(frozen=True)
class AttackTables:
    """Precomputed leaper attacks and line masks.

    Table layout:
    - knight[64], king[64]: attack masks per square
    - pawn[2][64]: capture masks per color (forward diagonals only)
    - files[8], ranks[8]: the eight squares of each file / rank
    """

    knight: Tuple[int, ...]
    king: Tuple[int, ...]
    pawn: Tuple[Tuple[int, ...], Tuple[int, ...]]
    files: Tuple[int, ...]
    ranks: Tuple[int, ...]

    @classmethod
    def build(cls) -> "AttackTables":
        knight = tuple(_offset_mask(sq, KNIGHT_OFFSETS) for sq in range(64))
        king = tuple(_offset_mask(sq, KING_OFFSETS) for sq in range(64))
        white_pawn = tuple(_offset_mask(sq, ((-1, 1), (1, 1))) for sq in range(64))
        black_pawn = tuple(_offset_mask(sq, ((-1, -1), (1, -1))) for sq in range(64))
        files = tuple(sum(1 << (r * 8 + f) for r in range(8)) for f in range(8))
        ranks = tuple(0xFF << (r * 8) for r in range(8))
        return cls(
            knight=knight,
            king=king,
            pawn=(white_pawn, black_pawn),
            files=files,
            ranks=ranks,
        )

    def pawn_capture_sources(self, to_sq: int, color: Color) -> int:
        """Squares from which a pawn of ``color`` captures onto ``to_sq``.

        A white pawn captures upwards, so its sources are the squares a black
        pawn on ``to_sq`` would attack, and vice versa.
        """
        return self.pawn[color.opposite][to_sq]


_tables: Optional[AttackTables] = None
_tables_lock = threading.Lock()


def get_attack_tables() -> AttackTables:
    """Return the process-wide attack tables, building them on first use."""
    global _tables
    tables = _tables
    if tables is None:
        with _tables_lock:
            if _tables is None:
                _tables = AttackTables.build()
            tables = _tables
    return tables


def _ray_attacks(sq: int, occ: int, directions: Tuple[Tuple[int, int], ...]) -> int:
    f, r = sq % 8, sq // 8
    bb = 0
    for df, dr in directions:
        tf, tr = f + df, r + dr
        while _on_board(tf, tr):
            bit = 1 << (tr * 8 + tf)
            bb |= bit
            if occ & bit:
                break
            tf += df
            tr += dr
    return bb


def rook_attacks(sq: int, occ: int) -> int:
    """Orthogonal rays from ``sq``, each including the first blocker in ``occ``."""
    return _ray_attacks(sq, occ, ROOK_DIRECTIONS)


def bishop_attacks(sq: int, occ: int) -> int:
    """Diagonal rays from ``sq``, each including the first blocker in ``occ``."""
    return _ray_attacks(sq, occ, BISHOP_DIRECTIONS)


def queen_attacks(sq: int, occ: int) -> int:
    return rook_attacks(sq, occ) | bishop_attacks(sq, occ)


def iter_squares(bb: int):
    """Yield set square indices of ``bb`` from least to most significant."""
    while bb:
        lsb = bb & -bb
        yield lsb.bit_length() - 1
        bb ^= lsb
