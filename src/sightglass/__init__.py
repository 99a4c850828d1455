"""Sightglass: how AI coding agents choose their dependencies."""

__version__ = "0.1.0"
