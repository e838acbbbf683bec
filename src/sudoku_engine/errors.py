"""Shared error types for the rule engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

SEVERITY_ERROR = "ERROR"
SEVERITY_WARN = "WARN"


@dataclass(frozen=True)
class ValidationIssue:
    """Single finding produced while validating configuration input."""

    code: str
    msg: str
    path: str
    severity: str


def make_error(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct an error-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_ERROR)


def make_warning(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct a warning-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_WARN)


class EngineConfigError(RuntimeError):
    """Base class for configuration failures carrying validation issues."""

    def __init__(self, message: str, issues: Iterable[ValidationIssue] = ()) -> None:
        self.issues: Tuple[ValidationIssue, ...] = tuple(issues)
        details = "; ".join(f"{issue.path}: {issue.msg}" for issue in self.issues)
        super().__init__(f"{message}: {details}" if details else message)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == SEVERITY_ERROR]


class SettingsError(EngineConfigError):
    """Raised when resolved settings fail schema validation."""


class BackendError(EngineConfigError):
    """Raised when a collaborator backend cannot be resolved."""


__all__ = [
    "BackendError",
    "EngineConfigError",
    "SEVERITY_ERROR",
    "SEVERITY_WARN",
    "SettingsError",
    "ValidationIssue",
    "make_error",
    "make_warning",
]
