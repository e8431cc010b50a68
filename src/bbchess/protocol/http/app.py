from __future__ import annotations

import logging
from typing import Dict, Literal, Optional

from fastapi import FastAPI, Response
from pydantic import BaseModel, ConfigDict, Field

from .error import register_error_handlers
from .logging_middleware import RequestIDLoggingMiddleware
from ...config import Settings
from ...engine.board import Position
from ...engine.move import Move, parse_castle, parse_promotion
from ...engine.store import BoardStore
from ...engine.types import CastleSide, slot_char


logger = logging.getLogger(__name__)


class FenRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    strict: Optional[bool] = Field(
        default=None, description="Reject malformed FEN; defaults to the server setting"
    )


class SanRequest(BaseModel):
    san: str = Field(..., description="SAN token without check/annotation suffixes, e.g. Nbd7")


class MovePayload(BaseModel):
    """Wire form of a move; squares are 0..63 (a1=0)."""

    model_config = ConfigDict(populate_by_name=True)

    from_sq: int = Field(..., alias="from")
    to_sq: int = Field(..., alias="to")
    promotion: Optional[Literal["n", "b", "r", "q"]] = None
    castle: Optional[Literal["K", "Q"]] = None
    en_passant: bool = False

    def to_move(self) -> Move:
        return Move(
            self.from_sq,
            self.to_sq,
            promotion=parse_promotion(self.promotion),
            castle=parse_castle(self.castle),
            en_passant=self.en_passant,
        )

    @classmethod
    def from_move(cls, move: Move) -> "MovePayload":
        castle: Optional[Literal["K", "Q"]] = None
        if move.castle is not None:
            castle = "K" if move.castle is CastleSide.KINGSIDE else "Q"
        return cls(
            from_sq=move.from_sq,
            to_sq=move.to_sq,
            promotion=move.promotion.letter.lower() if move.promotion is not None else None,  # type: ignore[arg-type]
            castle=castle,
            en_passant=move.en_passant,
        )


class BoardState(BaseModel):
    board_id: str
    fen: str
    zobrist_key: int
    zobrist_hex: str


class ResolveResponse(BaseModel):
    board_id: str
    san: str
    move: Optional[MovePayload]


class SanMoveResponse(BaseModel):
    board_id: str
    ok: bool
    fen: str


class ZobristResponse(BaseModel):
    board_id: str
    zobrist_key: int
    zobrist_hex: str


class PositionResponse(BaseModel):
    board_id: str
    side_to_move: Literal["w", "b"]
    bitboards: Dict[str, int]
    white: int
    black: int
    occupied: int
    zobrist_key: int
    zobrist_hex: str


def _hex(key: int) -> str:
    return f"{key:016x}"


def create_app(settings: Optional[Settings] = None, store: Optional[BoardStore] = None) -> FastAPI:
    settings = settings if settings is not None else Settings.from_env()
    app = FastAPI(title="Bitboard Chess API", version="0.1.0")

    logging.basicConfig(level=settings.log_level)

    app.add_middleware(RequestIDLoggingMiddleware)
    register_error_handlers(app)

    if store is None:
        store = BoardStore(max_boards=settings.max_boards)
    app.state.store = store
    app.state.settings = settings

    def _state(board_id: str) -> BoardState:
        fen = store.to_fen(board_id)
        key = store.get_zobrist_key(board_id)
        return BoardState(board_id=board_id, fen=fen, zobrist_key=key, zobrist_hex=_hex(key))

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/boards", response_model=BoardState)
    async def create_board() -> BoardState:
        return _state(store.create())

    @app.delete("/api/boards/{board_id}", status_code=204)
    async def destroy_board(board_id: str) -> Response:
        store.destroy(board_id)
        return Response(status_code=204)

    @app.post("/api/boards/{board_id}/reset", response_model=BoardState)
    async def reset_board(board_id: str) -> BoardState:
        store.reset(board_id)
        return _state(board_id)

    @app.put("/api/boards/{board_id}/fen", response_model=BoardState)
    async def load_fen(board_id: str, req: FenRequest) -> BoardState:
        strict = settings.strict_fen if req.strict is None else req.strict
        store.load_from_fen(board_id, req.fen, strict=strict)
        return _state(board_id)

    @app.get("/api/boards/{board_id}/fen", response_model=BoardState)
    async def get_fen(board_id: str) -> BoardState:
        return _state(board_id)

    @app.post("/api/boards/{board_id}/resolve", response_model=ResolveResponse)
    async def resolve_san(board_id: str, req: SanRequest) -> ResolveResponse:
        move = store.resolve_san(board_id, req.san)
        return ResolveResponse(
            board_id=board_id,
            san=req.san,
            move=MovePayload.from_move(move) if move is not None else None,
        )

    @app.post("/api/boards/{board_id}/san", response_model=SanMoveResponse)
    async def make_move_san(board_id: str, req: SanRequest) -> SanMoveResponse:
        ok = store.make_move_san(board_id, req.san)
        return SanMoveResponse(board_id=board_id, ok=ok, fen=store.to_fen(board_id))

    @app.post("/api/boards/{board_id}/move", response_model=BoardState)
    async def make_move(board_id: str, req: MovePayload) -> BoardState:
        store.make_move(board_id, req.to_move())
        return _state(board_id)

    @app.get("/api/boards/{board_id}/zobrist", response_model=ZobristResponse)
    async def get_zobrist(board_id: str) -> ZobristResponse:
        key = store.get_zobrist_key(board_id)
        return ZobristResponse(board_id=board_id, zobrist_key=key, zobrist_hex=_hex(key))

    @app.get("/api/boards/{board_id}/position", response_model=PositionResponse)
    async def get_position(board_id: str) -> PositionResponse:
        pos: Position = store.get_position(board_id)
        return PositionResponse(
            board_id=board_id,
            side_to_move=pos.side_to_move.fen_char,  # type: ignore[arg-type]
            bitboards={slot_char(slot): bb for slot, bb in enumerate(pos.bitboards)},
            white=pos.white,
            black=pos.black,
            occupied=pos.occupied,
            zobrist_key=pos.zobrist_key,
            zobrist_hex=_hex(pos.zobrist_key),
        )

    return app
