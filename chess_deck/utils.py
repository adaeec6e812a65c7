from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any


def load_json(path: str | Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def stable_int_id(s: str) -> int:
    # genanki deck/model ids must be int; keep stable across runs.
    digest = hashlib.sha1(s.encode("utf-8")).digest()
    n = int.from_bytes(digest[:8], "big", signed=False)
    return n % (2**31 - 1)


def format_stats(stats: Any) -> str:
    """Render a stats dataclass as a single 'k=v k=v' line."""
    return " ".join(f"{k}={v}" for k, v in vars(stats).items())
