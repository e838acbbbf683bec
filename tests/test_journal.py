from __future__ import annotations

import json

import project_config
from sudoku_engine.journal import EventJournal


def teardown_function():
    project_config.reload()


def test_append_writes_jsonl_with_timestamp(tmp_path) -> None:
    journal = EventJournal(tmp_path)
    path = journal.append({"event": {"event": "clean_cell"}})
    journal.append({"event": {"event": "find_hint"}, "ts": "fixed"})

    assert path.parent.parent == tmp_path
    assert path.name == "journal_00.jsonl"
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines[0]["event"] == {"event": "clean_cell"}
    assert "ts" in lines[0]
    assert lines[1]["ts"] == "fixed"


def test_rotation_by_size(tmp_path) -> None:
    journal = EventJournal(tmp_path, max_bytes=10)
    first = journal.append({"n": 1})
    second = journal.append({"n": 2})
    assert first != second
    assert second.name == "journal_01.jsonl"


def test_from_config_disabled_by_default() -> None:
    project_config.reload()
    assert EventJournal.from_config() is None


def test_from_config_enabled(tmp_path, monkeypatch) -> None:
    config = tmp_path / "config.toml"
    config.write_text(
        f'[journal]\nenabled = true\ndir = "{(tmp_path / "j").as_posix()}"\nmax_bytes = 2048\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("SUDOKU_ENGINE_CONFIG", str(config))
    project_config.reload()

    journal = EventJournal.from_config()
    assert journal is not None
    assert journal.max_bytes == 2048
    assert journal.base_dir == tmp_path / "j"
