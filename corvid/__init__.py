"""
Corvid - server platform edition management.

Packages:
- corvid.config: TOML configuration
- corvid.plugin: installed plugins, update center, edition installer
- corvid.edition: licenses and edition state
- corvid.db / corvid.migration: database access and data migrations
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
