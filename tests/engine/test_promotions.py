from __future__ import annotations

import pytest

from bbchess.engine.board import Board, WP, WQ
from bbchess.engine.errors import InvalidMoveError
from bbchess.engine.move import Move, str_to_square
from bbchess.engine.types import PieceKind


@pytest.mark.parametrize(
    "san, expected",
    [
        ("e8=Q", "k3Q3/8/8/8/8/8/8/4K3 b - - 0 1"),
        ("e8=R", "k3R3/8/8/8/8/8/8/4K3 b - - 0 1"),
        ("e8=B", "k3B3/8/8/8/8/8/8/4K3 b - - 0 1"),
        ("e8=N", "k3N3/8/8/8/8/8/8/4K3 b - - 0 1"),
    ],
)
def test_white_push_promotions(san: str, expected: str) -> None:
    b = Board.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert b.make_move_san(san)
    assert b.to_fen() == expected


def test_capture_promotion_replaces_victim() -> None:
    b = Board.from_fen("3rk3/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert b.make_move_san("exd8=N")
    assert b.to_fen() == "3Nk3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_black_promotion() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/3p4/4K3 b - - 0 1")
    assert b.make_move_san("d1=R")
    assert b.to_fen() == "4k3/8/8/8/8/8/8/3rK3 w - - 0 2"


def test_promotion_move_built_by_hand() -> None:
    b = Board.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    b.make_move(Move(str_to_square("e7"), str_to_square("e8"), promotion=PieceKind.QUEEN))
    assert b.bb[WP] == 0
    assert b.bb[WQ] == 1 << str_to_square("e8")


def test_promotion_to_king_is_rejected() -> None:
    b = Board.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    before = b.copy()
    with pytest.raises(InvalidMoveError):
        b.make_move(Move(str_to_square("e7"), str_to_square("e8"), promotion=PieceKind.KING))
    assert b == before


def test_promotion_letter_must_be_a_piece() -> None:
    b = Board.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert b.resolve_san("e8=K") is None
    assert b.resolve_san("e8=P") is None
