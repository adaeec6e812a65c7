"""Glyph-encoded board text.

The output is meant to be displayed with a chess font that maps Private Use
Area code points to dark-square pieces/markers and frame segments. Light
squares use the standard Unicode chess symbols so boards stay readable as
plain text.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable

import chess

from .errors import BoardRenderError

LINE_BREAK = "<br/>"

# Order matches the font layout: K Q R B N P, black pieces follow at +6.
_ROLE_INDEX = MappingProxyType(
    {
        chess.KING: 0,
        chess.QUEEN: 1,
        chess.ROOK: 2,
        chess.BISHOP: 3,
        chess.KNIGHT: 4,
        chess.PAWN: 5,
    }
)
_BLACK_OFFSET = 6

_PIECE_BASE = MappingProxyType({"light": 0x2654, "dark": 0xE154})
_MARKER = MappingProxyType({"light": 0x2022, "dark": 0xE122})
_EMPTY = MappingProxyType({"light": 0x00A0, "dark": 0xE100})

_FRAME_TOP = (0xE300, 0xE301, 0xE302)
_FRAME_LEFT = 0xE303
_FRAME_RIGHT = 0xE304
_FRAME_BOTTOM = (0xE305, 0xE306, 0xE307)


def square_shade(square: chess.Square) -> str:
    return "light" if chess.BB_SQUARES[square] & chess.BB_LIGHT_SQUARES else "dark"


def _build_piece_table() -> MappingProxyType:
    table: dict[tuple[chess.PieceType, chess.Color, str], int] = {}
    for role, idx in _ROLE_INDEX.items():
        for color in chess.COLORS:
            for shade, base in _PIECE_BASE.items():
                offset = idx + (_BLACK_OFFSET if color == chess.BLACK else 0)
                table[(role, color, shade)] = base + offset
    return MappingProxyType(table)


PIECE_GLYPHS = _build_piece_table()
MARKER_GLYPHS = _MARKER
EMPTY_GLYPHS = _EMPTY


def square_glyph(board: chess.BaseBoard, square: chess.Square, highlight: frozenset[int]) -> int:
    shade = square_shade(square)
    piece = board.piece_at(square)
    if piece is not None:
        return PIECE_GLYPHS[(piece.piece_type, piece.color, shade)]
    if square in highlight:
        return MARKER_GLYPHS[shade]
    return EMPTY_GLYPHS[shade]


def iter_view_squares(side: chess.Color) -> list[list[chess.Square]]:
    """Rows of squares as seen from `side` (top row first)."""
    if side == chess.WHITE:
        ranks = list(reversed(range(8)))
        files = list(range(8))
    else:
        ranks = list(range(8))
        files = list(reversed(range(8)))
    return [[chess.square(f, r) for f in files] for r in ranks]


def _frame_row(parts: tuple[int, int, int]) -> str:
    left, mid, right = parts
    return chr(left) + chr(mid) * 8 + chr(right)


def render_board(
    board: chess.BaseBoard,
    side: chess.Color,
    highlight: Iterable[chess.Square] = (),
) -> str:
    """Render `board` from `side`'s point of view.

    Empty squares listed in `highlight` get a marker glyph. Pure function:
    identical arguments always give identical text.
    """
    marked = frozenset(highlight)

    out: list[str] = [_frame_row(_FRAME_TOP), LINE_BREAK]
    for row in iter_view_squares(side):
        cells = "".join(chr(square_glyph(board, sq, marked)) for sq in row)
        out.append(chr(_FRAME_LEFT) + cells + chr(_FRAME_RIGHT))
        out.append(LINE_BREAK)
    out.append(_frame_row(_FRAME_BOTTOM))
    text = "".join(out)

    try:
        text.encode("utf-16")
    except UnicodeEncodeError as e:
        raise BoardRenderError(f"board text is not encodable: {e}") from e
    return text

