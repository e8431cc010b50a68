"""Bitboard chess position engine: SAN resolution, move application, FEN and Zobrist hashing."""

__version__ = "0.1.0"
