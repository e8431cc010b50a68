from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from .errors import FormatError
from .move import square_to_str, str_to_square
from .types import CASTLING_ORDER, CastlingRights, Color, char_slot, slot_char

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_BY_CHAR = {ch: flag for flag, ch in CASTLING_ORDER}


@dataclass
class FenFields:
    """Decoded FEN, ready to be installed into a board."""

    bb: List[int]
    side_to_move: Color
    castling: CastlingRights
    ep_square: Optional[int]
    halfmove_clock: int
    fullmove_number: int


def parse_fen(fen: str, *, strict: bool = False) -> Optional[FenFields]:
    """Decode a Forsyth-Edwards Notation string.

    Args:
        fen (str): FEN text.
        strict (bool): Reject malformed input instead of repairing it.

    Returns:
        Optional[FenFields]: Decoded position. In lenient mode ``None`` means
        there is no placement to install (empty input, or not 8 ranks).

    Raises:
        FormatError: In strict mode, if any of the six fields is missing or
            malformed.

    Notes:
        The lenient (default) parser never raises. Unknown placement
        characters are skipped, pieces past the h-file are dropped, unknown
        castling letters are ignored, an unreadable en-passant field means no
        target, and unreadable counters fall back to ``0`` and ``1``.
    """
    if strict:
        return _parse_strict(fen)
    parts = fen.split() if isinstance(fen, str) else []
    if not parts:
        return None
    ranks = parts[0].split("/")
    if len(ranks) != 8:
        return None
    stm = parts[1] if len(parts) > 1 else "w"
    castling = parts[2] if len(parts) > 2 else "-"
    ep = parts[3] if len(parts) > 3 else "-"
    halfmove = parts[4] if len(parts) > 4 else ""
    fullmove = parts[5] if len(parts) > 5 else ""

    bb = [0] * 12
    for rank_idx, rank in zip(range(7, -1, -1), ranks):
        file_idx = 0
        for ch in rank:
            if "1" <= ch <= "8":
                file_idx += int(ch)
                continue
            try:
                slot = char_slot(ch)
            except ValueError:
                continue
            if file_idx < 8:
                bb[slot] |= 1 << (rank_idx * 8 + file_idx)
            file_idx += 1

    rights = CastlingRights.NONE
    for ch in castling:
        rights |= _CASTLING_BY_CHAR.get(ch, CastlingRights.NONE)

    ep_square: Optional[int] = None
    if ep != "-":
        try:
            ep_square = str_to_square(ep[:2])
        except ValueError:
            ep_square = None

    return FenFields(
        bb=bb,
        side_to_move=Color.BLACK if stm == "b" else Color.WHITE,
        castling=rights,
        ep_square=ep_square,
        halfmove_clock=int(halfmove) if _is_count(halfmove) else 0,
        fullmove_number=int(fullmove) if _is_count(fullmove) and int(fullmove) > 0 else 1,
    )


def _is_count(s: str) -> bool:
    return s.isascii() and s.isdigit()


def _parse_strict(fen: str) -> FenFields:
    if not fen or not isinstance(fen, str):
        raise FormatError("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) != 6:
        raise FormatError(f"FEN must have 6 fields, got {len(parts)}")
    placement, stm, castling, ep, halfmove, fullmove = parts

    ranks = placement.split("/")
    if len(ranks) != 8:
        raise FormatError("FEN board must have 8 ranks")
    bb = [0] * 12
    for rank_idx, rank in zip(range(7, -1, -1), ranks):
        file_idx = 0
        for ch in rank:
            if "0" <= ch <= "9":
                n = int(ch)
                if n < 1 or n > 8:
                    raise FormatError("invalid empty count in FEN rank")
                file_idx += n
                continue
            try:
                slot = char_slot(ch)
            except ValueError as e:
                raise FormatError(f"invalid piece in FEN: {ch!r}") from e
            if file_idx >= 8:
                raise FormatError("too many squares in FEN rank")
            bb[slot] |= 1 << (rank_idx * 8 + file_idx)
            file_idx += 1
        if file_idx != 8:
            raise FormatError(f"rank {rank_idx + 1} does not sum to 8 squares in FEN")

    if stm not in ("w", "b"):
        raise FormatError("side to move must be 'w' or 'b'")

    rights = CastlingRights.NONE
    if castling != "-":
        for ch in castling:
            flag = _CASTLING_BY_CHAR.get(ch)
            if flag is None or rights & flag:
                raise FormatError(f"invalid castling rights: {castling!r}")
            rights |= flag

    ep_square: Optional[int] = None
    if ep != "-":
        try:
            ep_square = str_to_square(ep)
        except ValueError as e:
            raise FormatError("invalid en passant square") from e
        if ep_square // 8 not in (2, 5):
            raise FormatError("invalid en passant square rank")

    try:
        halfmove_clock = int(halfmove)
        fullmove_number = int(fullmove)
    except ValueError as e:
        raise FormatError("invalid move counters in FEN") from e
    if halfmove_clock < 0 or fullmove_number <= 0:
        raise FormatError("invalid move counters in FEN")

    return FenFields(
        bb=bb,
        side_to_move=Color.WHITE if stm == "w" else Color.BLACK,
        castling=rights,
        ep_square=ep_square,
        halfmove_clock=halfmove_clock,
        fullmove_number=fullmove_number,
    )


def format_fen(board: "Board") -> str:
    """Serialize ``board`` into FEN; fields always appear in the standard order."""
    ranks_str: List[str] = []
    for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
        run = 0
        row = []
        for file_idx in range(8):
            slot = board.slot_at(rank_idx * 8 + file_idx)
            if slot is None:
                run += 1
            else:
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(slot_char(slot))
        if run > 0:
            row.append(str(run))
        ranks_str.append("".join(row))
    placement = "/".join(ranks_str)

    castling = "".join(ch for flag, ch in CASTLING_ORDER if board.castling & flag) or "-"
    ep = square_to_str(board.ep_square) if board.ep_square is not None else "-"
    return (
        f"{placement} {board.side_to_move.fen_char} {castling} {ep} "
        f"{board.halfmove_clock} {board.fullmove_number}"
    )
