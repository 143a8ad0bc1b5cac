"""Result exporters."""

from .gpx import GPXExporter

__all__ = ["GPXExporter"]
