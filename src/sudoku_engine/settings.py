"""Game settings and their resolution from config, environment and overrides.

Precedence, lowest first: dataclass defaults, ``config.toml [settings]``,
``SUDOKU_SETTING_<NAME>`` environment variables, explicit overrides.  The
merged mapping is validated against :data:`SETTINGS_SCHEMA` before the frozen
:class:`Settings` is built, so a typo in any layer surfaces as a
:class:`~sudoku_engine.errors.SettingsError`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Mapping, Optional

import jsonschema

from project_config import get_section

from .errors import SettingsError, ValidationIssue, make_error, make_warning

_LOGGER = logging.getLogger(__name__)

_ENV_PREFIX = "SUDOKU_SETTING_"


@dataclass(frozen=True)
class Settings:
    """The five user-facing toggles."""

    check_guesses_when_entered: bool = False
    start_in_automatic_mode: bool = False
    highlight_conflicts: bool = True
    play_sound_on_solve: bool = True
    show_clock: bool = True

    def toggled(self, name: str) -> "Settings":
        if name not in SETTING_NAMES:
            issue = make_error("settings.unknown", f"unknown setting {name!r}", f"$.{name}")
            raise SettingsError("Unknown setting", [issue])
        return replace(self, **{name: not getattr(self, name)})

    def to_payload(self) -> Dict[str, bool]:
        return asdict(self)


SETTING_NAMES = tuple(f.name for f in fields(Settings))

SETTINGS_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {name: {"type": "boolean"} for name in SETTING_NAMES},
    "additionalProperties": False,
}


def _coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in {"1", "true", "yes", "on"}:
            return True
        if normalised in {"0", "false", "no", "off"}:
            return False
    return None


def unknown_env_settings(env: Mapping[str, str]) -> List[ValidationIssue]:
    """Warnings for ``SUDOKU_SETTING_*`` variables that name no setting."""

    known = {f"{_ENV_PREFIX}{name.upper()}" for name in SETTING_NAMES}
    return [
        make_warning("settings.env_unknown", f"{key} does not name a setting", f"$.env.{key}")
        for key in sorted(env)
        if key.startswith(_ENV_PREFIX) and key not in known
    ]


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    for issue in unknown_env_settings(env):
        _LOGGER.warning("%s: %s", issue.path, issue.msg)
    payload: Dict[str, Any] = {}
    for name in SETTING_NAMES:
        key = f"{_ENV_PREFIX}{name.upper()}"
        if key not in env:
            continue
        raw = env[key]
        parsed = _coerce_bool(raw)
        # Unparseable strings are kept so the schema check reports them.
        payload[name] = raw if parsed is None else parsed
    return payload


def _config_overrides() -> Dict[str, Any]:
    section = get_section("settings", {})
    if not isinstance(section, dict):
        raise SettingsError(
            "Invalid configuration",
            [make_error("settings.not_table", "[settings] must be a table", "$.settings")],
        )
    return dict(section)


def _schema_path(exc: jsonschema.ValidationError) -> str:
    components: List[str] = ["$"]
    for part in exc.absolute_path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def validate_settings(payload: Mapping[str, Any]) -> List[ValidationIssue]:
    """Return schema issues for a raw settings mapping."""

    validator = jsonschema.Draft202012Validator(SETTINGS_SCHEMA)
    issues: List[ValidationIssue] = []
    for exc in sorted(validator.iter_errors(dict(payload)), key=lambda e: list(e.absolute_path)):
        issues.append(make_error(f"settings.{exc.validator}", exc.message, _schema_path(exc)))
    return issues


def resolve_settings(
    overrides: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    use_config: bool = True,
) -> Settings:
    """Merge every settings layer and return the validated result."""

    env_map = dict(os.environ) if env is None else dict(env)
    merged: Dict[str, Any] = asdict(Settings())
    if use_config:
        merged.update(_config_overrides())
    merged.update(_env_overrides(env_map))
    if overrides:
        merged.update(overrides)

    issues = validate_settings(merged)
    if issues:
        raise SettingsError("Invalid settings", issues)
    return Settings(**merged)


__all__ = [
    "SETTINGS_SCHEMA",
    "SETTING_NAMES",
    "Settings",
    "resolve_settings",
    "unknown_env_settings",
    "validate_settings",
]
