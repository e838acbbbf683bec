"""Command line helpers for generating and replaying games."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ports._loader import resolve_backend
from ports.generator_port import generate_puzzle
from sudoku_engine.controller import PuzzleController
from sudoku_engine.delta import Delta, canonicalise_deltas, from_payload
from sudoku_engine.events import event_from_payload
from sudoku_engine.session import SessionContext
from sudoku_engine.settings import resolve_settings


def _grid_text(cells: Iterable[int]) -> str:
    return "".join(str(d or 0) for d in cells)


def _pretty(cells: List[int]) -> str:
    lines = []
    for r in range(9):
        if r % 3 == 0:
            lines.append("+-------+-------+-------+")
        row = []
        for c in range(9):
            v = cells[r * 9 + c]
            row.append(str(v) if v else ".")
            if c % 3 == 2:
                row.append("|")
        lines.append("| " + " ".join(row))
    lines.append("+-------+-------+-------+")
    return "\n".join(lines)


def cmd_new(args: argparse.Namespace) -> int:
    backend = resolve_backend(args.impl, seed=args.seed)
    puzzle, solution = generate_puzzle(backend.generator)
    clues = [int(d) for d in puzzle.clues]
    if args.pretty:
        print(_pretty(clues))
        print()
        print(_pretty(list(solution)))
        return 0
    result: Dict[str, object] = {
        "backend": backend.impl_id,
        "clues": _grid_text(clues),
        "solution": _grid_text(solution),
        "clue_count": sum(1 for d in clues if d),
    }
    print(json.dumps(result, indent=2, sort_keys=True))
    return 0


def _iter_events(path: Path) -> Iterable[dict]:
    for line in path.read_text(encoding="utf-8").splitlines():
        value = line.strip()
        if not value or value.startswith("#"):
            continue
        yield json.loads(value)


def _split_record(payload: dict) -> Tuple[dict, Optional[Tuple[Delta, ...]]]:
    """Separate an event from the deltas a journal record expects of it.

    Plain event lines carry the event fields at the top level; journal
    records nest them under ``event`` next to the deltas they produced.
    """

    if isinstance(payload.get("event"), dict):
        expected = canonicalise_deltas(from_payload(item) for item in payload.get("deltas", []))
        return payload["event"], expected
    return payload, None


def cmd_replay(args: argparse.Namespace) -> int:
    settings = resolve_settings()
    backend = resolve_backend(args.impl, seed=args.seed)
    controller = PuzzleController(
        backend.generator,
        backend.solver,
        SessionContext(settings=settings, auto_candidates=settings.start_in_automatic_mode),
    )
    controller.new_game()
    signals: List[dict] = []
    mismatches: List[int] = []
    for line_no, payload in enumerate(_iter_events(Path(args.file)), start=1):
        event_payload, expected = _split_record(payload)
        for signal in controller.dispatch(event_from_payload(event_payload)):
            signals.append(signal.to_payload())
        if expected is not None and canonicalise_deltas(controller.last_deltas) != expected:
            mismatches.append(line_no)
    summary = controller.summary()
    summary["signals"] = signals
    summary["delta_mismatches"] = mismatches
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 1 if mismatches else 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sudoku rule engine helpers")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--impl", default=None, help="Backend implementation id or module path")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Generate a puzzle with its solution")
    new.add_argument("--seed", type=int, default=None)
    new.add_argument("--pretty", action="store_true", help="Print boxed grids instead of JSON")
    new.set_defaults(func=cmd_new)

    replay = sub.add_parser("replay", help="Apply a JSONL file of events or journal records to a seeded game")
    replay.add_argument("file")
    replay.add_argument("--seed", type=int, default=0)
    replay.set_defaults(func=cmd_replay)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
