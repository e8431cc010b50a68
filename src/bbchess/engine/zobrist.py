from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Tuple, TYPE_CHECKING

from .tables import MASK64, iter_squares
from .types import CASTLING_ORDER, Color

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


MASK32 = 0xFFFFFFFF
ZOBRIST_SEED = 0x5EED


class _Mulberry32:
    """32-bit state generator; a 64-bit key is two successive words (lo, then hi)."""

    def __init__(self, seed: int) -> None:
        self.state = seed & MASK32

    def next32(self) -> int:
        self.state = (self.state + 0x6D2B79F5) & MASK32
        t = self.state
        t = ((t ^ (t >> 15)) * (t | 1)) & MASK32
        t ^= t >> 7
        return (t ^ (t >> 12)) & MASK32

    def next64(self) -> int:
        lo = self.next32()
        hi = self.next32()
        return (hi << 32) | lo


@dataclass(frozen=True)
class ZobristKeys:
    """Zobrist key table.

    Table layout:
    - piece_square[64][12]: per square, per piece slot (white pawn .. black king)
    - side_to_move: toggled in when black is to move
    - castling[4]: K, Q, k, q
    - ep_file[8]: files a..h

    Keys are drawn in exactly that order (square-major for pieces), so the
    resulting hashes are stable across processes and ports of the engine.
    """

    piece_square: Tuple[Tuple[int, ...], ...]
    side_to_move: int
    castling: Tuple[int, int, int, int]
    ep_file: Tuple[int, ...]

    @classmethod
    def generate(cls, seed: int = ZOBRIST_SEED) -> "ZobristKeys":
        prng = _Mulberry32(seed)
        piece_square = tuple(tuple(prng.next64() for _ in range(12)) for _ in range(64))
        side_to_move = prng.next64()
        castling = (prng.next64(), prng.next64(), prng.next64(), prng.next64())
        ep_file = tuple(prng.next64() for _ in range(8))
        return cls(
            piece_square=piece_square,
            side_to_move=side_to_move,
            castling=castling,
            ep_file=ep_file,
        )


_keys: Optional[ZobristKeys] = None
_keys_lock = threading.Lock()


def get_zobrist_keys() -> ZobristKeys:
    """Return the process-wide key table, generating it on first use."""
    global _keys
    keys = _keys
    if keys is None:
        with _keys_lock:
            if _keys is None:
                _keys = ZobristKeys.generate()
            keys = _keys
    return keys


def compute_hash(board: "Board", keys: Optional[ZobristKeys] = None) -> int:
    """Compute the 64-bit Zobrist hash of ``board``.

    Pure function of the board fields; identical positions hash identically
    no matter which move sequence produced them.
    """
    z = keys if keys is not None else get_zobrist_keys()
    h = 0
    for slot in range(12):
        for sq in iter_squares(board.bb[slot]):
            h ^= z.piece_square[sq][slot]
    if board.side_to_move is Color.BLACK:
        h ^= z.side_to_move
    for i, (flag, _) in enumerate(CASTLING_ORDER):
        if board.castling & flag:
            h ^= z.castling[i]
    if board.ep_square is not None:
        h ^= z.ep_file[board.ep_square % 8]
    return h & MASK64
