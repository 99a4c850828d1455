"""Exceptions raised at the edges of the analysis pipeline.

The core (classifier, chain builder, risk scorer) never raises for
well-formed events; these cover loading inputs from disk.
"""


class SightglassError(Exception):
    """Base class for sightglass errors."""


class EventLoadError(SightglassError):
    """Events file is missing, unreadable, or holds no JSON structure."""


class KnowledgeBaseError(SightglassError):
    """Knowledge base file is unreadable or fails validation."""
