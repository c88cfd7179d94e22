"""
Corvid Plugin System - installed plugins and the update center.

This module handles:
- Plugin manifest parsing
- Discovery of installed plugins
- Update center catalog access
- Edition installation (see corvid.plugin.edition)
"""

from corvid.plugin.repository import (
    PluginError,
    PluginInfo,
    PluginNotFoundError,
    PluginRepository,
)

__all__ = ["PluginError", "PluginInfo", "PluginNotFoundError", "PluginRepository"]
