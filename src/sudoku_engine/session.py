"""Session context passed explicitly into every pipeline run."""

from __future__ import annotations

from dataclasses import dataclass, field

from .settings import Settings


@dataclass
class SessionContext:
    """Process-wide toggles for one game session.

    ``auto_candidates`` is the global candidate-mode flag: it selects the
    track that candidate toggles, propagation and display reads use.
    """

    settings: Settings = field(default_factory=Settings)
    auto_candidates: bool = False

    def toggle_candidate_mode(self) -> bool:
        self.auto_candidates = not self.auto_candidates
        return self.auto_candidates

    def toggle_setting(self, name: str) -> Settings:
        self.settings = self.settings.toggled(name)
        return self.settings


__all__ = ["SessionContext"]
