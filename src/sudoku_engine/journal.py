"""Light-weight JSONL event journal with rotation support."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from project_config import get_section

_DEFAULT_MAX_BYTES = 10 * 1024 * 1024


def _date_prefix() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d")


class EventJournal:
    """Append-only JSONL journal rotated by size inside per-day directories."""

    def __init__(self, base_dir: str | Path, *, max_bytes: int | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.max_bytes = max_bytes or _DEFAULT_MAX_BYTES
        self._lock = threading.Lock()
        self._current: Optional[Path] = None

    @classmethod
    def from_config(cls) -> Optional["EventJournal"]:
        """Build the journal described by ``[journal]``; ``None`` when disabled."""

        section = get_section("journal", {})
        if not isinstance(section, dict) or not section.get("enabled", False):
            return None
        return cls(section.get("dir", "logs/journal"), max_bytes=int(section.get("max_bytes", 0)) or None)

    def _resolve_path(self) -> Path:
        date_dir = self.base_dir / _date_prefix()
        date_dir.mkdir(parents=True, exist_ok=True)

        if self._current is not None and self._current.parent == date_dir and self._current.exists():
            if self._current.stat().st_size < self.max_bytes:
                return self._current

        counter = 0
        while True:
            candidate = date_dir / f"journal_{counter:02d}.jsonl"
            if not candidate.exists() or candidate.stat().st_size < self.max_bytes:
                self._current = candidate
                return candidate
            counter += 1

    def append(self, event: Dict[str, Any]) -> Path:
        """Append ``event`` to the active file and return its path."""

        payload = dict(event)
        payload.setdefault("ts", datetime.now(timezone.utc).isoformat(timespec="milliseconds"))

        line = json.dumps(payload, sort_keys=True, ensure_ascii=False)
        with self._lock:
            path = self._resolve_path()
            with path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        return path

    @property
    def current_path(self) -> Optional[Path]:
        return self._current


__all__ = ["EventJournal"]
