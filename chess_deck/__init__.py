"""Chess repertoire flashcard engine.

This package turns annotated PGN repertoires into an Anki deck:
- one card per studied position (transpositions merged)
- optional square-recognition cards
- a single .apkg written at the end of a successful run
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
