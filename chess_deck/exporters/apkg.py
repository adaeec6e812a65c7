from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import genanki

from ..assembler import KIND_REPERTOIRE
from ..config import DeckConfig
from ..errors import PackageWriteError
from ..squares import KIND_SQUARE
from ..types import NoteRecord
from ..utils import stable_int_id

REPERTOIRE_MODEL_ID = 0x25BBBB4805F55380
SQUARES_MODEL_ID = 0x25BBBB4805F55381

# Name the stylesheet refers to; the configured font is packaged under it.
FONT_MEDIA_NAME = "_chess_merida_unicode.ttf"


@dataclass
class ApkgExportStats:
    notes_exported: int = 0
    media_files: int = 0


def build_repertoire_model(css: str) -> genanki.Model:
    return genanki.Model(
        REPERTOIRE_MODEL_ID,
        "Mchess",
        fields=[{"name": "front"}, {"name": "back"}],
        templates=[
            {
                "name": "Chess card",
                "qfmt": "{{front}}",
                "afmt": "{{back}}",
            }
        ],
        css=css,
    )


def build_squares_model(css: str) -> genanki.Model:
    board = "<div class='chess'>{{square_board}}</div>"
    return genanki.Model(
        SQUARES_MODEL_ID,
        "Mchess squares",
        fields=[{"name": "square_name"}, {"name": "square_board"}, {"name": "square_color"}],
        templates=[
            {
                "name": "Square location",
                "qfmt": "Where on the board is {{square_name}}?",
                "afmt": f"{board}<br/>{{{{square_name}}}}",
            },
            {
                "name": "Square name",
                "qfmt": f"What square is this?<br/>{board}",
                "afmt": f"{{{{square_name}}}}<br/>{board}",
            },
            {
                "name": "Square color",
                "qfmt": "What color is {{square_name}}?",
                "afmt": f"{{{{square_name}}}} is {{{{square_color}}}}<br/>{board}",
            },
        ],
        css=css,
    )


def _to_genanki_note(record: NoteRecord, models: dict[str, genanki.Model]) -> genanki.Note:
    model = models.get(record.kind)
    if model is None:
        raise PackageWriteError(f"unknown note kind: {record.kind}")
    return genanki.Note(model=model, fields=list(record.fields), tags=list(record.tags), guid=record.guid)


def export_apkg(
    *,
    notes: list[NoteRecord],
    out_path: str | Path,
    cfg: DeckConfig,
) -> ApkgExportStats:
    """Write `notes` as one Anki deck into an .apkg at `out_path`.

    Rules:
    - The chess font is required and bundled under FONT_MEDIA_NAME
    - The destination directory must already exist
    - The file appears at out_path only after a complete, successful write
    - Any genanki rejection aborts the export (no partial output)
    """
    out_path = Path(out_path)
    stats = ApkgExportStats()

    if cfg.font_path is None:
        raise PackageWriteError("font asset required: pass --font or set font_path in the config")
    if not Path(cfg.font_path).is_file():
        raise PackageWriteError(f"font asset not found: {cfg.font_path}")
    if not out_path.parent.is_dir():
        raise PackageWriteError(f"output directory does not exist: {out_path.parent}")

    try:
        css = cfg.load_css()
    except OSError as e:
        raise PackageWriteError(f"could not read stylesheet: {e}") from e

    models = {
        KIND_REPERTOIRE: build_repertoire_model(css),
        KIND_SQUARE: build_squares_model(css),
    }
    deck = genanki.Deck(stable_int_id(f"chess_deck:deck:{cfg.deck_name}"), cfg.deck_name, cfg.deck_description)

    for record in notes:
        try:
            deck.add_note(_to_genanki_note(record, models))
        except PackageWriteError:
            raise
        except Exception as e:
            raise PackageWriteError(f"could not build note guid={record.guid}: {e}") from e
        stats.notes_exported += 1

    with tempfile.TemporaryDirectory(prefix="chess_deck_media_") as media_tmp:
        font_dst = Path(media_tmp) / FONT_MEDIA_NAME
        shutil.copyfile(cfg.font_path, font_dst)
        media_files = [str(font_dst)]

        fd, tmp_name = tempfile.mkstemp(prefix=f".{out_path.name}.", suffix=".tmp", dir=out_path.parent)
        os.close(fd)
        try:
            pkg = genanki.Package(deck)
            pkg.media_files = media_files
            pkg.write_to_file(tmp_name)
            os.replace(tmp_name, out_path)
        except Exception as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise PackageWriteError(f"could not write anki package {out_path}: {e}") from e
        stats.media_files = len(media_files)

    return stats


def describe_models() -> dict[str, Any]:
    """Model ids by note kind (used by validate)."""
    return {KIND_REPERTOIRE: REPERTOIRE_MODEL_ID, KIND_SQUARE: SQUARES_MODEL_ID}
