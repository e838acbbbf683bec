from __future__ import annotations

import pytest

import project_config
from sudoku_engine.errors import SettingsError
from sudoku_engine.settings import (
    SETTING_NAMES,
    Settings,
    resolve_settings,
    unknown_env_settings,
    validate_settings,
)


def setup_function():
    project_config.reload()


def teardown_function():
    project_config.reload()


def test_defaults() -> None:
    settings = resolve_settings(env={}, use_config=False)
    assert settings == Settings()
    assert settings.check_guesses_when_entered is False
    assert settings.start_in_automatic_mode is False
    assert settings.highlight_conflicts is True
    assert settings.play_sound_on_solve is True
    assert settings.show_clock is True


def test_config_file_defaults_match_dataclass() -> None:
    assert resolve_settings(env={}) == Settings()


def test_environment_overrides_config(tmp_path, monkeypatch) -> None:
    config = tmp_path / "config.toml"
    config.write_text("[settings]\nshow_clock = false\nstart_in_automatic_mode = true\n", encoding="utf-8")
    monkeypatch.setenv("SUDOKU_ENGINE_CONFIG", str(config))
    project_config.reload()

    settings = resolve_settings(env={"SUDOKU_SETTING_SHOW_CLOCK": "on"})
    assert settings.show_clock is True
    assert settings.start_in_automatic_mode is True


def test_explicit_overrides_win() -> None:
    env = {"SUDOKU_SETTING_HIGHLIGHT_CONFLICTS": "0"}
    settings = resolve_settings({"highlight_conflicts": True}, env=env, use_config=False)
    assert settings.highlight_conflicts is True
    assert resolve_settings(env=env, use_config=False).highlight_conflicts is False


def test_invalid_env_value_reports_issue() -> None:
    with pytest.raises(SettingsError) as excinfo:
        resolve_settings(env={"SUDOKU_SETTING_SHOW_CLOCK": "maybe"}, use_config=False)
    issue = excinfo.value.errors[0]
    assert issue.code == "settings.type"
    assert issue.path == "$.show_clock"


def test_unknown_key_rejected() -> None:
    issues = validate_settings({"dark_mode": True})
    assert [issue.code for issue in issues] == ["settings.additionalProperties"]
    with pytest.raises(SettingsError):
        resolve_settings({"dark_mode": True}, env={}, use_config=False)


def test_toggled_flips_one_setting() -> None:
    settings = Settings().toggled("play_sound_on_solve")
    assert settings.play_sound_on_solve is False
    assert settings.to_payload()["show_clock"] is True
    assert set(settings.to_payload()) == set(SETTING_NAMES)


def test_unknown_env_setting_is_a_warning(caplog) -> None:
    env = {"SUDOKU_SETTING_DARK_MODE": "1"}
    issues = unknown_env_settings(env)
    assert [(i.code, i.severity) for i in issues] == [("settings.env_unknown", "WARN")]
    assert resolve_settings(env=env, use_config=False) == Settings()
    assert "SUDOKU_SETTING_DARK_MODE" in caplog.text
