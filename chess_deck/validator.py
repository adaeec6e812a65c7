from __future__ import annotations

import json
import sqlite3
import tempfile
import zipfile
from pathlib import Path
from typing import Any

from .exporters.apkg import FONT_MEDIA_NAME, describe_models

FIELD_SEPARATOR = "\x1f"


def read_apkg_notes(apkg_path: str | Path) -> list[dict[str, Any]]:
    """Load notes (guid, model id, tags, fields) from an .apkg collection."""
    with zipfile.ZipFile(apkg_path, "r") as z:
        col_bytes = z.read("collection.anki2")

    with tempfile.TemporaryDirectory(prefix="apkg_collection_") as tmp:
        tmp_path = Path(tmp) / "collection.anki2"
        tmp_path.write_bytes(col_bytes)
        conn = sqlite3.connect(str(tmp_path))
        try:
            rows = conn.execute("SELECT guid, mid, tags, flds FROM notes ORDER BY id").fetchall()
        finally:
            conn.close()

    return [
        {
            "guid": str(guid),
            "mid": int(mid),
            "tags": str(tags).split(),
            "fields": str(flds).split(FIELD_SEPARATOR),
        }
        for guid, mid, tags, flds in rows
    ]


def read_apkg_media(apkg_path: str | Path) -> dict[str, str]:
    with zipfile.ZipFile(apkg_path, "r") as z:
        media_raw = z.read("media")
    data = json.loads(media_raw.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("apkg media mapping is not an object")
    return {str(k): str(v) for k, v in data.items()}


def validate_apkg(
    apkg_path: str | Path,
    *,
    expect_notes: int | None = None,
    expect_font: bool = False,
) -> tuple[bool, dict[str, Any]]:
    """Validate an exported chess deck package.

    Checks:
    - zip contains collection.anki2 and a media mapping
    - every note uses one of the chess models
    - note guids are unique
    - optional: note count and bundled font
    """
    apkg_path = Path(apkg_path)
    errors: list[str] = []
    warnings: list[str] = []
    notes: list[dict[str, Any]] = []

    if not apkg_path.exists() or not apkg_path.is_file():
        errors.append(f"apkg_missing: {apkg_path}")
        return False, {"errors": errors, "warnings": warnings, "notes_total": 0}

    try:
        with zipfile.ZipFile(apkg_path, "r") as z:
            names = set(z.namelist())
        if "collection.anki2" not in names:
            errors.append("apkg_missing_collection.anki2")
        if "media" not in names:
            errors.append("apkg_missing_media_mapping")
        if errors:
            return False, {"errors": errors, "warnings": warnings, "notes_total": 0}

        media = read_apkg_media(apkg_path)
        missing_blobs = [idx for idx in media if idx not in names]
        if missing_blobs:
            errors.append("apkg_missing_media_blobs: " + ", ".join(missing_blobs[:50]))
        if expect_font and FONT_MEDIA_NAME not in media.values():
            errors.append(f"apkg_missing_font: {FONT_MEDIA_NAME}")

        notes = read_apkg_notes(apkg_path)
    except zipfile.BadZipFile:
        errors.append("apkg_invalid_zip")
    except (sqlite3.Error, ValueError, KeyError) as e:
        errors.append(f"apkg_validate_failed: {e}")

    known_models = set(describe_models().values())
    unknown = sorted({n["mid"] for n in notes if n["mid"] not in known_models})
    if unknown:
        errors.append("apkg_unknown_models: " + ", ".join(str(m) for m in unknown))

    seen: set[str] = set()
    dupes: list[str] = []
    for n in notes:
        if n["guid"] in seen:
            dupes.append(n["guid"])
        seen.add(n["guid"])
    if dupes:
        errors.append("apkg_duplicate_guids: " + ", ".join(dupes[:20]))

    if expect_notes is not None and len(notes) != expect_notes:
        errors.append(f"apkg_note_count: expected={expect_notes} found={len(notes)}")

    if not notes:
        warnings.append("apkg_no_notes")

    ok = not errors
    return ok, {"errors": errors, "warnings": warnings, "notes_total": len(notes)}
