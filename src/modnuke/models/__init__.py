"""modnuke data models."""

from modnuke.models.scan_rules import IGNORE_DIRS, LOCK_FILES, MATCH_NAME, ScanRules
from modnuke.models.nuke_summary import NukeSummary

__all__ = [
    "IGNORE_DIRS",
    "LOCK_FILES",
    "MATCH_NAME",
    "NukeSummary",
    "ScanRules",
]
