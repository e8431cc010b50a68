from __future__ import annotations

import threading

from bbchess.engine.move import str_to_square
from bbchess.engine.tables import (
    AttackTables,
    bishop_attacks,
    get_attack_tables,
    iter_squares,
    queen_attacks,
    rook_attacks,
)
from bbchess.engine.types import Color


def _squares(*names: str) -> int:
    bb = 0
    for n in names:
        bb |= 1 << str_to_square(n)
    return bb


def test_knight_and_king_masks_clip_at_edges() -> None:
    t = get_attack_tables()
    assert t.knight[str_to_square("a1")] == _squares("b3", "c2")
    assert bin(t.knight[str_to_square("d4")]).count("1") == 8
    assert t.king[str_to_square("a1")] == _squares("a2", "b1", "b2")
    assert bin(t.king[str_to_square("e4")]).count("1") == 8


def test_pawn_attacks_are_forward_diagonals_per_color() -> None:
    t = get_attack_tables()
    e4 = str_to_square("e4")
    assert t.pawn[Color.WHITE][e4] == _squares("d5", "f5")
    assert t.pawn[Color.BLACK][e4] == _squares("d3", "f3")
    assert t.pawn[Color.WHITE][str_to_square("a2")] == _squares("b3")
    assert t.pawn[Color.WHITE][str_to_square("h8")] == 0


def test_pawn_capture_sources_reverse_the_attack() -> None:
    t = get_attack_tables()
    d6 = str_to_square("d6")
    assert t.pawn_capture_sources(d6, Color.WHITE) == _squares("c5", "e5")
    assert t.pawn_capture_sources(d6, Color.BLACK) == _squares("c7", "e7")


def test_file_and_rank_masks() -> None:
    t = get_attack_tables()
    assert t.files[0] == 0x0101010101010101
    assert t.files[7] == 0x8080808080808080
    assert t.ranks[0] == 0xFF
    assert t.ranks[7] == 0xFF << 56


def test_slider_rays_stop_on_first_blocker_inclusive() -> None:
    a1 = str_to_square("a1")
    assert bin(rook_attacks(a1, 0)).count("1") == 14
    blocked = rook_attacks(a1, _squares("a4", "c1"))
    assert blocked == _squares("a2", "a3", "a4", "b1", "c1")

    d4 = str_to_square("d4")
    assert bin(bishop_attacks(d4, 0)).count("1") == 13
    assert bishop_attacks(d4, _squares("e5")) & _squares("f6") == 0
    assert bishop_attacks(d4, _squares("e5")) & _squares("e5")
    assert queen_attacks(d4, 0) == rook_attacks(d4, 0) | bishop_attacks(d4, 0)


def test_iter_squares_yields_ascending_indices() -> None:
    assert list(iter_squares(_squares("h8", "a1", "e4"))) == [0, 28, 63]
    assert list(iter_squares(0)) == []


def test_tables_are_built_once_under_concurrent_access() -> None:
    seen = []

    def worker() -> None:
        seen.append(get_attack_tables())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()
    assert all(t is seen[0] for t in seen)
    assert seen[0] == AttackTables.build()
