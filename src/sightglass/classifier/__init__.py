"""Discovery classification of agent tool-call events."""

from .pattern_classifier import PatternClassifier, classify_events, mark_abandoned_installs
from .state import ScanState, path_matches

__all__ = [
    "PatternClassifier",
    "ScanState",
    "classify_events",
    "mark_abandoned_installs",
    "path_matches",
]
