"""Outcome of a full find-and-nuke run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class NukeSummary:
    """Paths found and removed during one run."""

    found: list[Path] = field(default_factory=list)
    nuked: list[Path] = field(default_factory=list)
    elapsed: float = 0.0
    install_returncode: int | None = None

    @property
    def found_count(self) -> int:
        return len(self.found)

    @property
    def nuked_count(self) -> int:
        return len(self.nuked)
