from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from chess_deck.board import LINE_BREAK


def _split_cells(text: str) -> list[str]:
    # drop the top/bottom frame rows and the left/right border of each rank
    rows = text.split(LINE_BREAK)[1:-1]
    return [ch for row in rows for ch in row[1:-1]]


@pytest.fixture
def board_cells() -> Callable[[str], list[str]]:
    """Extract the 64 square glyphs (top-left first) from rendered board text."""
    return _split_cells


@pytest.fixture
def font_file(tmp_path: Path) -> Path:
    """Stand-in font asset; genanki packages media as opaque bytes."""
    font = tmp_path / "merida.ttf"
    font.write_bytes(b"\x00\x01\x00\x00fake-font")
    return font
