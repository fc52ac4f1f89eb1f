"""Name rules deciding which directory entries the scanner matches or skips."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

MATCH_NAME = "node_modules"

# Framework build caches that may contain their own node_modules copies.
IGNORE_DIRS = frozenset({".next", ".svelte-kit"})

LOCK_FILES: dict[str, tuple[str, ...]] = {
    "npm": ("package-lock.json",),
    "yarn": ("yarn.lock",),
    "pnpm": ("pnpm-lock.yaml",),
    "bun": ("bun.lockb", "bun.lock"),
}

Verdict = Literal["match", "ignore", "inspect"]


@dataclass(frozen=True, slots=True)
class ScanRules:
    """Exact-name match and ignore sets.

    A name in ``match_names`` wins over ``ignore_names``; everything else
    has to be inspected on disk.
    """

    match_names: frozenset[str]
    ignore_names: frozenset[str] = IGNORE_DIRS

    @classmethod
    def default(cls, include_lock_files: bool = False) -> ScanRules:
        names = {MATCH_NAME}
        if include_lock_files:
            for files in LOCK_FILES.values():
                names.update(files)
        return cls(match_names=frozenset(names))

    def classify(self, name: str) -> Verdict:
        if name in self.match_names:
            return "match"
        if name in self.ignore_names:
            return "ignore"
        return "inspect"
