from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path


def run_cmd(args: list[str], *, cwd: Path) -> str:
    p = subprocess.run(args, cwd=str(cwd), text=True, capture_output=True)
    out = (p.stdout or "") + (p.stderr or "")
    if p.returncode != 0:
        raise RuntimeError(f"command_failed rc={p.returncode}: {' '.join(args)}\n{out}")
    return p.stdout.strip()


def parse_kv(line: str) -> dict[str, int]:
    # e.g. "files_read=2 games_read=3 moves_studied=12 ..."
    out: dict[str, int] = {}
    for p in line.strip().split():
        if "=" not in p:
            continue
        k, v = p.split("=", 1)
        if v.isdigit():
            out[k] = int(v)
    return out


def build(repo: Path, out: Path, font: Path) -> dict[str, int]:
    sample = repo / "samples" / "smoke"
    stdout = run_cmd(
        [
            sys.executable,
            "-m",
            "chess_deck",
            "build",
            str(out),
            "-w",
            str(sample / "white.pgn"),
            "-b",
            str(sample / "black.pgn"),
            "--squares",
            "--font",
            str(font),
        ],
        cwd=repo,
    )
    return parse_kv(stdout.splitlines()[0])


def main() -> int:
    if len(sys.argv) != 2:
        print("usage: check_build_and_validate.py <chess-font.ttf>")
        return 2
    font = Path(sys.argv[1]).resolve()

    repo = Path(__file__).resolve().parents[2]
    workspace = repo / "workspace" / "smoke"

    if workspace.exists():
        shutil.rmtree(workspace)
    workspace.mkdir(parents=True, exist_ok=True)

    first = build(repo, workspace / "first.apkg", font)
    second = build(repo, workspace / "second.apkg", font)
    if first != second:
        raise RuntimeError(f"stats_differ: {first} != {second}")

    expected = first["notes_exported"]
    for name in ("first.apkg", "second.apkg"):
        run_cmd(
            [sys.executable, "-m", "chess_deck", "validate", str(workspace / name), "--expect-notes", str(expected), "--expect-font"],
            cwd=repo,
        )

    from chess_deck.validator import read_apkg_notes

    guids_a = sorted(n["guid"] for n in read_apkg_notes(workspace / "first.apkg"))
    guids_b = sorted(n["guid"] for n in read_apkg_notes(workspace / "second.apkg"))
    if guids_a != guids_b:
        raise RuntimeError("guids_not_stable")

    print("STATS", first)
    print("OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
