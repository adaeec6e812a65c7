from __future__ import annotations

from dataclasses import dataclass, field

import chess


@dataclass(frozen=True)
class Position:
    placement: str  # board FEN piece placement, e.g. rnbqkbnr/pppppppp/8/...
    turn: chess.Color

    @classmethod
    def from_board(cls, board: chess.Board) -> "Position":
        return cls(placement=board.board_fen(), turn=board.turn)

    def to_board(self) -> chess.BaseBoard:
        return chess.BaseBoard(self.placement)


def side_name(side: chess.Color) -> str:
    return chess.COLOR_NAMES[side]


@dataclass(frozen=True)
class AggregationKey:
    position: Position  # position before the studied move
    side: chess.Color  # studied side

    @property
    def side_name(self) -> str:
        return side_name(self.side)


@dataclass
class AggregationValue:
    # result position -> SAN -> comments (in insertion order, duplicates kept)
    answers: dict[Position, dict[str, list[str]]] = field(default_factory=dict)
    # Free-form question annotations. Nothing fills this yet.
    questions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MoveTuple:
    before: Position
    after: Position
    san: str
    comment: str


@dataclass
class NoteRecord:
    kind: str  # repertoire | square
    fields: list[str]
    tags: list[str]
    guid: str
