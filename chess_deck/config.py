from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .utils import load_json

RESOURCES_DIR = Path(__file__).resolve().parent / "resources"
DEFAULT_CSS_PATH = RESOURCES_DIR / "chess.css"


@dataclass(frozen=True)
class DeckConfig:
    deck_name: str = "Chess"
    deck_description: str = "chess repertoire deck"
    font_path: str | None = None
    css_path: str | None = None
    split_answers: bool = False

    def with_overrides(self, **overrides: Any) -> "DeckConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def load_css(self) -> str:
        path = Path(self.css_path) if self.css_path else DEFAULT_CSS_PATH
        return path.read_text(encoding="utf-8")


def load_config(config_path: str | Path | None) -> DeckConfig:
    if config_path is None:
        return DeckConfig()
    data = load_json(config_path)
    if not isinstance(data, dict):
        raise ValueError(f"config must be a JSON object: {config_path}")

    known = {f.name for f in fields(DeckConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown config keys in {config_path}: {', '.join(unknown)}")
    return DeckConfig(**data)
