from __future__ import annotations

from bbchess.engine.board import Board, STARTPOS_FEN
from bbchess.engine.types import CastlingRights, Color
from bbchess.engine.zobrist import ZobristKeys, compute_hash, get_zobrist_keys


# Reference values from the seeded generator (seed 0x5EED, lo word first)
STARTPOS_KEY = 0x8228839C5F9F7918
AFTER_E4_KEY = 0x5949DAB876550B34


def test_key_table_layout_and_first_keys() -> None:
    z = get_zobrist_keys()
    assert len(z.piece_square) == 64
    assert all(len(row) == 12 for row in z.piece_square)
    assert len(z.castling) == 4
    assert len(z.ep_file) == 8
    assert z.piece_square[0][0] == 0x90C787D49DE366E8
    assert z.side_to_move == 0x9B820391283E9C6A
    assert z.castling[0] == 0x94F449122E9CC0C3
    assert z.ep_file[7] == 0x0575D381588561FB


def test_key_table_is_deterministic() -> None:
    assert ZobristKeys.generate() == get_zobrist_keys()
    assert ZobristKeys.generate(seed=1) != get_zobrist_keys()


def test_startpos_reference_keys() -> None:
    b = Board.startpos()
    assert b.zobrist_key == STARTPOS_KEY
    assert b.make_move_san("e4")
    assert b.zobrist_key == AFTER_E4_KEY


def test_zobrist_deterministic_same_position() -> None:
    b1 = Board.from_fen(STARTPOS_FEN)
    b2 = Board.startpos()
    assert compute_hash(b1) == compute_hash(b2)

    # Round-trip FEN keeps same hash
    b3 = Board.from_fen(b1.to_fen())
    assert compute_hash(b3) == compute_hash(b1)


def test_transpositions_share_a_key() -> None:
    a = Board.startpos()
    for san in ("Nf3", "Nf6", "Nc3", "Nc6"):
        assert a.make_move_san(san)
    b = Board.startpos()
    for san in ("Nc3", "Nc6", "Nf3", "Nf6"):
        assert b.make_move_san(san)
    assert a.to_fen() == b.to_fen()
    assert a.zobrist_key == b.zobrist_key


def test_loaded_fen_matches_replayed_key() -> None:
    b = Board.startpos()
    for san in ("e4", "e5", "Nf3", "Nc6"):
        assert b.make_move_san(san)
    assert Board.from_fen(b.to_fen()).zobrist_key == b.zobrist_key


def test_zobrist_side_to_move_changes_hash() -> None:
    b = Board.startpos()
    h_w = compute_hash(b)
    b.side_to_move = Color.BLACK
    assert compute_hash(b) == h_w ^ get_zobrist_keys().side_to_move


def test_zobrist_castling_changes_hash() -> None:
    b = Board.startpos()
    h_all = compute_hash(b)
    b.castling &= ~CastlingRights.BLACK_QUEENSIDE
    assert compute_hash(b) == h_all ^ get_zobrist_keys().castling[3]
    b.castling = CastlingRights.NONE
    assert compute_hash(b) != h_all


def test_zobrist_en_passant_keyed_by_file_only() -> None:
    b = Board.from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    h_ep = compute_hash(b)
    b.ep_square = None
    h_no_ep = compute_hash(b)
    assert h_ep != h_no_ep
    assert h_ep ^ h_no_ep == get_zobrist_keys().ep_file[4]
    b.ep_square = 44  # e6: same file, same key
    assert compute_hash(b) == h_ep


def test_zobrist_piece_placement_changes_hash() -> None:
    b = Board.startpos()
    h = compute_hash(b)
    b.bb[0] &= ~(1 << 8)  # drop the a2 pawn
    assert compute_hash(b) != h
