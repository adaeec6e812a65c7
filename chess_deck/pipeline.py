from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import chess

from .aggregator import RepertoireAggregator
from .assembler import assemble_notes
from .config import DeckConfig
from .exporters.apkg import export_apkg
from .squares import square_notes
from .types import NoteRecord
from .walker import add_games, read_games


@dataclass
class RunOptions:
    out_path: str
    white: list[str] = field(default_factory=list)
    black: list[str] = field(default_factory=list)
    squares: bool = False


@dataclass
class BuildStats:
    files_read: int = 0
    games_read: int = 0
    moves_studied: int = 0
    questions_total: int = 0
    square_notes: int = 0
    notes_exported: int = 0
    media_bundled: int = 0


class DeckPipeline:
    """PGN files -> aggregator -> notes -> .apkg, as one all-or-nothing job."""

    def __init__(self, cfg: DeckConfig, opts: RunOptions):
        self.cfg = cfg
        self.opts = opts
        self.aggregator = RepertoireAggregator()
        self.stats = BuildStats()

    def _inputs(self) -> list[tuple[str, chess.Color]]:
        return [(p, chess.WHITE) for p in self.opts.white] + [(p, chess.BLACK) for p in self.opts.black]

    def collect(self) -> None:
        for path, side in self._inputs():
            games = read_games(path)
            self.stats.files_read += 1
            self.stats.games_read += len(games)
            self.stats.moves_studied += add_games(self.aggregator, games, side)

    def build_notes(self) -> list[NoteRecord]:
        notes: list[NoteRecord] = []
        if self.opts.squares:
            notes.extend(square_notes())
            self.stats.square_notes = len(notes)

        entries = self.aggregator.drain()
        self.stats.questions_total = len(entries)
        notes.extend(assemble_notes(entries, split=self.cfg.split_answers))
        return notes

    def run(self) -> BuildStats:
        self.collect()
        notes = self.build_notes()
        export = export_apkg(notes=notes, out_path=Path(self.opts.out_path), cfg=self.cfg)
        self.stats.notes_exported = export.notes_exported
        self.stats.media_bundled = export.media_files
        return self.stats
