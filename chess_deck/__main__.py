"""Entry point for running chess_deck as a module.

Usage:
    python -m chess_deck <command> [options]
"""
from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
