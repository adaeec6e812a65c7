from __future__ import annotations

import io
from pathlib import Path
from typing import Iterator

import chess
import chess.pgn

from .aggregator import RepertoireAggregator
from .errors import PgnParseError, PgnReadError
from .types import AggregationKey, MoveTuple, Position


def read_games(path: str | Path) -> list[chess.pgn.Game]:
    """Read every game from a PGN file.

    Fail-fast: an unreadable file or any parser error aborts the run.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise PgnReadError(f"could not read input pgn file {path}: {e}") from e

    games: list[chess.pgn.Game] = []
    handle = io.StringIO(text)
    while True:
        game = chess.pgn.read_game(handle)
        if game is None:
            break
        if game.errors:
            details = "; ".join(str(err) for err in game.errors[:5])
            raise PgnParseError(f"could not parse game #{len(games) + 1} in {path}: {details}")
        games.append(game)
    return games


def walk_game(game: chess.pgn.GameNode, side: chess.Color) -> Iterator[MoveTuple]:
    """Yield one MoveTuple per move made by `side` anywhere in the tree.

    Nodes are visited in declaration order (main line first, depth first)
    using an explicit stack, so deep variation trees do not hit the
    recursion limit. The node passed in never emits itself.
    """
    root_board = game.board()
    stack: list[tuple[chess.pgn.ChildNode, chess.Board]] = [
        (child, root_board) for child in reversed(game.variations)
    ]
    while stack:
        node, before = stack.pop()
        after = before.copy(stack=False)
        san = before.san(node.move)
        after.push(node.move)

        if before.turn == side:
            yield MoveTuple(
                before=Position.from_board(before),
                after=Position.from_board(after),
                san=san,
                comment=(node.comment or "").strip(),
            )

        for child in reversed(node.variations):
            stack.append((child, after))


def add_games(aggregator: RepertoireAggregator, games: list[chess.pgn.Game], side: chess.Color) -> int:
    """Feed every studied move of `games` into `aggregator`; returns tuples emitted."""
    emitted = 0
    for game in games:
        for t in walk_game(game, side):
            aggregator.insert(AggregationKey(t.before, side), t.after, t.san, t.comment)
            emitted += 1
    return emitted
