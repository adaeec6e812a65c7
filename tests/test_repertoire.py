"""Repertoire walking and aggregation tests.

Tests cover:
1. Tree walking per studied side (counts, order, comments)
2. Deep trees without recursion
3. PGN reading failures
4. Aggregator append/drain lifecycle
5. Transposition merging
"""
from __future__ import annotations

import io

import chess
import chess.pgn
import pytest

from chess_deck.aggregator import RepertoireAggregator
from chess_deck.errors import AggregatorDrainedError, PgnParseError, PgnReadError
from chess_deck.types import AggregationKey, Position
from chess_deck.walker import add_games, read_games, walk_game


def parse(pgn: str) -> chess.pgn.Game:
    game = chess.pgn.read_game(io.StringIO(pgn))
    assert game is not None
    return game


def position_after(*sans: str) -> Position:
    board = chess.Board()
    for san in sans:
        board.push_san(san)
    return Position.from_board(board)


# ═══════════════════════════════════════════════════════════════════════════════
# WALKER
# ═══════════════════════════════════════════════════════════════════════════════

class TestWalkGame:
    """walk_game emits one tuple per move made by the studied side."""

    def test_root_without_children_emits_nothing(self):
        game = chess.pgn.Game()
        assert list(walk_game(game, chess.WHITE)) == []
        assert list(walk_game(game, chess.BLACK)) == []

    def test_example_line_as_white(self):
        """1. e4 e5 2. Nf3 gives two questions for White."""
        tuples = list(walk_game(parse("1. e4 e5 2. Nf3 *"), chess.WHITE))

        assert [t.san for t in tuples] == ["e4", "Nf3"]
        assert tuples[0].before == Position.from_board(chess.Board())
        assert tuples[0].after == position_after("e4")
        assert tuples[1].before == position_after("e4", "e5")
        assert tuples[1].after == position_after("e4", "e5", "Nf3")

    def test_example_line_as_black(self):
        tuples = list(walk_game(parse("1. e4 e5 2. Nf3 *"), chess.BLACK))
        assert [t.san for t in tuples] == ["e5"]
        assert tuples[0].before == position_after("e4")

    def test_linear_game_counts(self):
        game = parse("1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 4. Ba4 *")
        assert len(list(walk_game(game, chess.WHITE))) == 4
        assert len(list(walk_game(game, chess.BLACK))) == 3

    def test_variations_in_declaration_order(self):
        """Main line first, then sibling variations, depth first."""
        game = parse("1. e4 (1. d4 d5 2. c4) (1. c4) e5 2. Nf3 *")
        sans = [t.san for t in walk_game(game, chess.WHITE)]
        assert sans == ["e4", "Nf3", "d4", "c4", "c4"]

    def test_black_repertoire_with_variations(self):
        game = parse("1. e4 c5 (1... e5 2. Nf3 Nc6) 2. Nf3 d6 *")
        sans = [t.san for t in walk_game(game, chess.BLACK)]
        assert sans == ["c5", "d6", "e5", "Nc6"]

    def test_comments_are_carried(self):
        game = parse("1. e4 { Best by test. } e5 2. Nf3 *")
        tuples = list(walk_game(game, chess.WHITE))
        assert tuples[0].comment == "Best by test."
        assert tuples[1].comment == ""

    def test_custom_start_position(self):
        fen = "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"
        game = parse(f'[SetUp "1"]\n[FEN "{fen}"]\n\n1. e4 Kd7 2. e5 *')
        tuples = list(walk_game(game, chess.WHITE))
        assert [t.san for t in tuples] == ["e4", "e5"]
        assert tuples[0].before.placement == chess.Board(fen).board_fen()

    def test_deep_tree_does_not_recurse(self):
        """A few thousand plies must not hit the recursion limit."""
        game = chess.pgn.Game()
        node: chess.pgn.GameNode = game
        shuffle = [chess.Move.from_uci(u) for u in ("g1f3", "g8f6", "f3g1", "f6g8")]
        plies = 4000
        for i in range(plies):
            node = node.add_variation(shuffle[i % 4])

        assert len(list(walk_game(game, chess.WHITE))) == plies // 2
        assert len(list(walk_game(game, chess.BLACK))) == plies // 2


# ═══════════════════════════════════════════════════════════════════════════════
# PGN READING
# ═══════════════════════════════════════════════════════════════════════════════

class TestReadGames:
    """read_games is fail-fast."""

    def test_reads_every_game(self, tmp_path):
        path = tmp_path / "rep.pgn"
        path.write_text(
            '[Event "A"]\n\n1. e4 e5 *\n\n[Event "B"]\n\n1. d4 d5 *\n',
            encoding="utf-8",
        )
        games = read_games(path)
        assert len(games) == 2
        assert games[1].headers["Event"] == "B"

    def test_empty_file_has_no_games(self, tmp_path):
        path = tmp_path / "empty.pgn"
        path.write_text("", encoding="utf-8")
        assert read_games(path) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(PgnReadError) as exc:
            read_games(tmp_path / "missing.pgn")
        assert "missing.pgn" in str(exc.value)

    def test_illegal_move_is_fatal(self, tmp_path):
        path = tmp_path / "bad.pgn"
        path.write_text("1. e4 e5 2. Ke3 *\n", encoding="utf-8")
        with pytest.raises(PgnParseError) as exc:
            read_games(path)
        assert "bad.pgn" in str(exc.value)


# ═══════════════════════════════════════════════════════════════════════════════
# AGGREGATOR
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def start_key() -> AggregationKey:
    return AggregationKey(Position.from_board(chess.Board()), chess.WHITE)


class TestAggregator:
    """Insert appends; drain hands everything out exactly once."""

    def test_comments_append_in_order(self, start_key: AggregationKey):
        agg = RepertoireAggregator()
        after = position_after("e4")
        agg.insert(start_key, after, "e4", "c1")
        agg.insert(start_key, after, "e4", "c2")

        [(key, value)] = agg.drain()
        assert key == start_key
        assert value.answers[after]["e4"] == ["c1", "c2"]

    def test_duplicate_comments_kept(self, start_key: AggregationKey):
        agg = RepertoireAggregator()
        after = position_after("e4")
        agg.insert(start_key, after, "e4", "same")
        agg.insert(start_key, after, "e4", "same")
        [(_, value)] = agg.drain()
        assert value.answers[after]["e4"] == ["same", "same"]

    def test_empty_comment_creates_entry_only(self, start_key: AggregationKey):
        agg = RepertoireAggregator()
        after = position_after("d4")
        agg.insert(start_key, after, "d4", "")
        [(_, value)] = agg.drain()
        assert value.answers == {after: {"d4": []}}
        assert value.questions == []

    def test_one_value_per_key(self, start_key: AggregationKey):
        agg = RepertoireAggregator()
        agg.insert(start_key, position_after("e4"), "e4")
        agg.insert(start_key, position_after("d4"), "d4")
        assert len(agg) == 1
        [(_, value)] = agg.drain()
        assert list(value.answers) == [position_after("e4"), position_after("d4")]

    def test_sides_are_separate_keys(self):
        agg = RepertoireAggregator()
        pos = Position.from_board(chess.Board())
        agg.insert(AggregationKey(pos, chess.WHITE), position_after("e4"), "e4")
        agg.insert(AggregationKey(pos, chess.BLACK), position_after("e4"), "e4")
        assert len(agg) == 2

    def test_drain_once(self, start_key: AggregationKey):
        agg = RepertoireAggregator()
        agg.insert(start_key, position_after("e4"), "e4")
        other = AggregationKey(position_after("e4", "e5"), chess.WHITE)
        agg.insert(other, position_after("e4", "e5", "Nf3"), "Nf3")

        drained = agg.drain()
        assert sorted(k.position.placement for k, _ in drained) == sorted(
            [start_key.position.placement, other.position.placement]
        )
        assert agg.is_drained
        assert len(agg) == 0
        assert agg.drain() == []

    def test_insert_after_drain_rejected(self, start_key: AggregationKey):
        agg = RepertoireAggregator()
        agg.drain()
        with pytest.raises(AggregatorDrainedError):
            agg.insert(start_key, position_after("e4"), "e4", "late")


# ═══════════════════════════════════════════════════════════════════════════════
# WALKER + AGGREGATOR
# ═══════════════════════════════════════════════════════════════════════════════

class TestAddGames:
    """Transpositions fold into one question."""

    def test_transposition_merges(self):
        games = [
            parse("1. e4 e5 2. Nf3 Nc6 3. Bc4 { Italian } *"),
            parse("1. Nf3 Nc6 2. e4 e5 3. Bc4 { via Nf3 } *"),
        ]
        agg = RepertoireAggregator()
        emitted = add_games(agg, games, chess.WHITE)

        assert emitted == 6
        entries = dict(agg.drain())
        assert len(entries) == 4

        start = entries[AggregationKey(Position.from_board(chess.Board()), chess.WHITE)]
        assert set(start.answers) == {position_after("e4"), position_after("Nf3")}

        merged_key = AggregationKey(position_after("e4", "e5", "Nf3", "Nc6"), chess.WHITE)
        merged = entries[merged_key]
        [(result, moves)] = merged.answers.items()
        assert result == position_after("e4", "e5", "Nf3", "Nc6", "Bc4")
        assert moves == {"Bc4": ["Italian", "via Nf3"]}

    def test_same_move_in_two_branches(self):
        """Identical transitions collect comments in declaration order."""
        game = parse("1. e4 { main } (1. e4 { side }) e5 *")
        agg = RepertoireAggregator()
        add_games(agg, [game], chess.WHITE)
        [(_, value)] = agg.drain()
        assert value.answers[position_after("e4")]["e4"] == ["main", "side"]
