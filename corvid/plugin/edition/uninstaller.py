"""
Edition Plugin Uninstaller.

Stages installed plugins for removal. A failure to remove one plugin is
logged and reported, never raised, so that callers can go on with the
other plugins.
"""

from pathlib import Path

from corvid.log import get_logger
from corvid.plugin.repository import PluginError, PluginRepository

logger = get_logger(__name__)


class EditionPluginUninstaller:
    def __init__(self, plugin_repository: PluginRepository, uninstalled_dir: Path):
        self._repository = plugin_repository
        self.uninstalled_dir = Path(uninstalled_dir)

    def uninstall(self, plugin_key: str) -> bool:
        """
        Stage one plugin for removal.

        Returns:
            True if the plugin was staged, False if it could not be
        """
        try:
            self._repository.uninstall(plugin_key, self.uninstalled_dir)
        except PluginError as e:
            logger.error(f"Failed to uninstall plugin {plugin_key}: {e}")
            return False

        logger.info(f"Plugin {plugin_key} will be removed on next restart")
        return True

    def cancel_uninstalls(self) -> list[str]:
        """Put back every plugin staged for removal."""
        restored = self._repository.restore(self.uninstalled_dir)
        if restored:
            logger.info(f"Cancelled uninstall of {', '.join(restored)}")
        return restored
