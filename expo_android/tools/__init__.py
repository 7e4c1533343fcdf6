"""MCP tools for Android automation."""

from . import apps, device, interaction, media, ui

__all__ = ["device", "ui", "interaction", "apps", "media"]
