from __future__ import annotations

import pytest

from bbchess.engine.board import BN, Board, WN, WP
from bbchess.engine.errors import InvalidMoveError
from bbchess.engine.move import Move, str_to_square
from bbchess.engine.types import CastleSide, Color, PieceKind


def sq(name: str) -> int:
    return str_to_square(name)


def test_pawn_double_push_updates_board() -> None:
    b = Board.startpos()
    b.make_move(Move(sq("e2"), sq("e4")))
    assert b.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    assert (b.bb[WP] >> sq("e4")) & 1
    assert not (b.bb[WP] >> sq("e2")) & 1


def test_capture_removes_enemy_piece() -> None:
    b = Board.startpos()
    for san in ("e4", "d5"):
        assert b.make_move_san(san)
    assert b.make_move_san("exd5")
    assert b.piece_at(sq("d5")) == (Color.WHITE, PieceKind.PAWN)
    assert b.to_fen() == "rnbqkbnr/ppp1pppp/8/3P4/8/8/PPPP1PPP/RNBQKBNR b KQkq - 0 2"


def test_knight_capture_clears_exactly_one_slot() -> None:
    b = Board.from_fen("4k3/8/8/3n4/8/4N3/8/4K3 w - - 0 1")
    assert b.make_move_san("Nxd5")
    assert b.bb[BN] == 0
    assert b.bb[WN] == 1 << sq("d5")
    assert sum(bin(x).count("1") for x in b.bb) == 3


def test_single_push_clears_en_passant_target() -> None:
    b = Board.startpos()
    assert b.make_move_san("e4")
    assert b.ep_square == sq("e3")
    assert b.make_move_san("e6")
    assert b.ep_square is None


def test_fullmove_increments_after_black_and_halfmove_is_untouched() -> None:
    b = Board.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 7 10")
    assert b.make_move_san("Nf3")
    assert (b.fullmove_number, b.halfmove_clock) == (10, 7)
    assert b.make_move_san("e5")
    assert (b.fullmove_number, b.halfmove_clock) == (11, 7)


@pytest.mark.parametrize(
    "move",
    [
        Move(sq("e3"), sq("e4")),  # empty from square
        Move(sq("e7"), sq("e5")),  # piece belongs to the other side
        Move(sq("d1"), sq("d2")),  # destination holds own piece
        Move(sq("e2"), sq("e2")),  # null move
        Move(-1, sq("e4")),
        Move(sq("e2"), 64),
        Move(sq("g1"), sq("f3"), promotion=PieceKind.QUEEN),  # only pawns promote
        Move(sq("e2"), sq("e4"), promotion=PieceKind.KING),
        Move(sq("g1"), sq("f3"), en_passant=True),
        Move(sq("e1"), sq("g1"), castle=CastleSide.KINGSIDE),  # f1 and g1 occupied
        Move(sq("d1"), sq("b1"), castle=CastleSide.QUEENSIDE),  # not the king
        Move(sq("e2"), sq("e4"), promotion=6),  # not a piece kind
        Move(sq("e2"), sq("e4"), promotion=-1),
        Move(sq("e2"), sq("e4"), promotion="q"),
        Move(sq("e1"), sq("g1"), castle=2),  # not a castle side
        Move(sq("e1"), sq("g1"), castle="K"),
    ],
)
def test_invalid_moves_raise_and_leave_board_untouched(move: Move) -> None:
    b = Board.startpos()
    before = b.copy()
    with pytest.raises(InvalidMoveError):
        b.make_move(move)
    assert b == before


def test_castle_with_mismatched_squares_is_rejected() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    with pytest.raises(InvalidMoveError):
        b.make_move(Move(4, 2, castle=CastleSide.KINGSIDE))


def test_invalid_move_error_is_a_value_error() -> None:
    b = Board.startpos()
    with pytest.raises(ValueError):
        b.make_move(Move(sq("e4"), sq("e5")))


def test_non_pawn_to_last_rank_needs_no_promotion() -> None:
    b = Board.from_fen("4k3/R7/8/8/8/8/8/4K3 w - - 0 1")
    assert b.make_move_san("Ra8")
    assert b.to_fen() == "R3k3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_resolved_moves_render_as_uci() -> None:
    b = Board.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    mv = b.resolve_san("e8=Q")
    assert mv is not None and mv.to_uci() == "e7e8q"
    assert Board.startpos().resolve_san("Nf3").to_uci() == "g1f3"


@pytest.mark.parametrize("promotion", [6, 9, 11, PieceKind.PAWN, PieceKind.KING])
def test_promotion_outside_piece_kinds_never_reaches_other_slots(promotion) -> None:
    b = Board.from_fen("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
    with pytest.raises(InvalidMoveError):
        b.make_move(Move(sq("a7"), sq("a8"), promotion=promotion))
    assert b.to_fen() == "4k3/P7/8/8/8/8/8/4K3 w - - 0 1"


def test_plain_int_fields_are_accepted_when_in_range() -> None:
    b = Board.from_fen("4k3/P7/8/8/8/8/8/R3K2R w KQ - 0 1")
    b.make_move(Move(sq("e1"), sq("g1"), castle=0))
    assert b.to_fen() == "4k3/P7/8/8/8/8/8/R4RK1 b - - 0 1"
    b.side_to_move = Color.WHITE
    b.make_move(Move(sq("a7"), sq("a8"), promotion=4))
    assert b.to_fen().startswith("Q3k3/")
