"""Getter settings loading."""

from .app import GetterSettings, get_settings


__all__ = ["GetterSettings", "get_settings"]
