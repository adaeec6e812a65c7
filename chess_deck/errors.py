from __future__ import annotations


class ChessDeckError(RuntimeError):
    """Base class for every fatal error of a deck build."""


class PgnReadError(ChessDeckError):
    """An input PGN file could not be read."""


class PgnParseError(ChessDeckError):
    """python-chess reported errors while parsing a game."""


class BoardRenderError(ChessDeckError):
    """Rendered board text is not valid text (glyph table inconsistency)."""


class AggregatorDrainedError(ChessDeckError):
    """Insert attempted on an aggregator that was already drained."""


class PackageWriteError(ChessDeckError):
    """genanki rejected a note/model or the package could not be written."""
