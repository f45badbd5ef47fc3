"""Export settings loading."""

from .app import ExportSettings, LogVerbosity, RenderTimings, get_settings


__all__ = ["ExportSettings", "LogVerbosity", "RenderTimings", "get_settings"]
