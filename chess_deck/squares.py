from __future__ import annotations

import chess

from .board import render_board, square_shade
from .types import NoteRecord

KIND_SQUARE = "square"

SQUARE_TAG = "chess::square"


def square_note(square: chess.Square) -> NoteRecord:
    name = chess.square_name(square)
    return NoteRecord(
        kind=KIND_SQUARE,
        fields=[
            name,
            render_board(chess.BaseBoard.empty(), chess.WHITE, [square]),
            square_shade(square),
        ],
        tags=[SQUARE_TAG],
        guid=f"chess_square_{name}",
    )


def square_notes() -> list[NoteRecord]:
    """One recognition note per board square (a1..h8)."""
    return [square_note(sq) for sq in chess.SQUARES]
