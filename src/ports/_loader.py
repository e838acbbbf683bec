"""Resolve and load collaborator backends."""

from __future__ import annotations

import importlib
import logging
import os
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Dict, Mapping, Optional

from project_config import get_section
from sudoku_engine.errors import BackendError, make_error

from .generator_port import PuzzleGenerator
from .solver_port import SolverFactory

_LOGGER = logging.getLogger(__name__)

_DEF_IMPL = "backtracking"
_IMPLEMENTATIONS: Dict[str, str] = {
    "backtracking": "puzzles.sudoku_9x9.backtracking",
}
_MODULE_CACHE: Dict[str, ModuleType] = {}


@dataclass(frozen=True)
class Backend:
    """Collaborator chosen for a session."""

    impl_id: str
    module_name: str
    decision_source: str
    generator: PuzzleGenerator
    solver: SolverFactory


def build_env(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Merge process environment with optional overrides."""

    env: Dict[str, str] = {str(k): str(v) for k, v in os.environ.items()}
    if overrides:
        env.update({str(k): str(v) for k, v in overrides.items()})
    return env


def _resolve_impl(env: Mapping[str, str]) -> tuple[str, str]:
    section = get_section("ports", {})
    impl = str(section.get("impl", _DEF_IMPL)) if isinstance(section, dict) else _DEF_IMPL
    source = "config"
    if env.get("PUZZLE_BACKEND_IMPL"):
        impl, source = env["PUZZLE_BACKEND_IMPL"], "env"
    if env.get("CLI_PUZZLE_BACKEND_IMPL"):
        impl, source = env["CLI_PUZZLE_BACKEND_IMPL"], "cli"
    return impl, source


def load_module(module_name: str) -> ModuleType:
    """Import ``module_name`` once and cache the instance."""

    cached = _MODULE_CACHE.get(module_name)
    if cached is not None:
        return cached
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise BackendError(
            "Backend import failed",
            [make_error("backend.import", str(exc), f"$.ports.{module_name}")],
        ) from exc
    _MODULE_CACHE[module_name] = module
    return module


def resolve_backend(
    impl: Optional[str] = None,
    *,
    seed: Optional[int] = None,
    options: Optional[Mapping[str, Any]] = None,
    env: Mapping[str, str] | None = None,
) -> Backend:
    """Pick the backend implementation and instantiate its generator and solver.

    Precedence: ``config.toml [ports] impl`` < ``PUZZLE_BACKEND_IMPL`` <
    ``CLI_PUZZLE_BACKEND_IMPL`` < the explicit ``impl`` argument.  An id
    containing a dot is imported as a module path directly.
    """

    if impl:
        impl_id, source = impl, "argument"
    else:
        impl_id, source = _resolve_impl(build_env(env))

    module_name = impl_id if "." in impl_id else _IMPLEMENTATIONS.get(impl_id)
    if module_name is None:
        raise BackendError(
            "Unknown backend",
            [make_error("backend.unknown", f"no implementation registered as {impl_id!r}", "$.ports.impl")],
        )

    module = load_module(module_name)
    try:
        create_generator = getattr(module, "port_create_generator")
        solver_factory = getattr(module, "port_solver_factory")
    except AttributeError as exc:
        raise BackendError(
            "Incomplete backend",
            [make_error("backend.surface", str(exc), f"$.ports.{module_name}")],
        ) from exc

    _LOGGER.debug("resolved backend %s (%s) via %s", impl_id, module_name, source)
    return Backend(
        impl_id=impl_id,
        module_name=module_name,
        decision_source=source,
        generator=create_generator(seed=seed, options=dict(options or {})),
        solver=solver_factory(),
    )


__all__ = ["Backend", "build_env", "load_module", "resolve_backend"]
