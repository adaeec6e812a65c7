from __future__ import annotations

import html
from typing import Iterable

import genanki

from .board import render_board
from .types import AggregationKey, AggregationValue, NoteRecord, Position, side_name

KIND_REPERTOIRE = "repertoire"

TAG_PREFIX = "chess::"


def _figure(board_text: str, caption: str) -> str:
    return (
        "<figure>\n"
        f'<div class="chess">{board_text}</div>\n'
        f"<figcaption>{caption}</figcaption>\n"
        "</figure>"
    )


def note_guid(key: AggregationKey, move: str | None = None) -> str:
    """Persistent note id; depends on the question only (plus the move when split)."""
    parts = [key.position.placement, side_name(key.position.turn), key.side_name]
    if move is not None:
        parts.append(move)
    return genanki.guid_for(*parts)


def front_html(key: AggregationKey, value: AggregationValue) -> str:
    caption = "<br/>\n".join(html.escape(q) for q in value.questions)
    return _figure(render_board(key.position.to_board(), key.side), caption)


def _answer_block(key: AggregationKey, result: Position, moves: dict[str, list[str]]) -> str:
    lines = []
    for san, comments in moves.items():
        joined = "<br/>".join(html.escape(c) for c in comments)
        lines.append(f"{html.escape(san)}<br/>{joined}<br/>\n")
    return _figure(render_board(result.to_board(), key.side), "".join(lines))


def back_html(key: AggregationKey, value: AggregationValue) -> str:
    # Several result positions under one question are transpositions or
    # alternative replies; all of them go on the same card back.
    blocks = [_answer_block(key, result, moves) for result, moves in value.answers.items()]
    return "<hr/>\n".join(blocks)


def assemble_note(key: AggregationKey, value: AggregationValue, *, guid: str | None = None) -> NoteRecord:
    return NoteRecord(
        kind=KIND_REPERTOIRE,
        fields=[front_html(key, value), back_html(key, value)],
        tags=[TAG_PREFIX + key.side_name],
        guid=guid or note_guid(key),
    )


def split_entry(
    key: AggregationKey, value: AggregationValue
) -> list[tuple[str, AggregationValue]]:
    """One single-answer value per (result position, move), keyed by move."""
    out: list[tuple[str, AggregationValue]] = []
    for result, moves in value.answers.items():
        for san, comments in moves.items():
            single = AggregationValue(answers={result: {san: list(comments)}}, questions=list(value.questions))
            out.append((san, single))
    return out


def assemble_notes(
    entries: Iterable[tuple[AggregationKey, AggregationValue]],
    *,
    split: bool = False,
) -> list[NoteRecord]:
    """Build note records for drained aggregator entries.

    With `split`, every move gets its own card (no transposition merging).
    """
    notes: list[NoteRecord] = []
    for key, value in entries:
        if not split:
            notes.append(assemble_note(key, value))
            continue
        for san, single in split_entry(key, value):
            notes.append(assemble_note(key, single, guid=note_guid(key, san)))
    return notes
