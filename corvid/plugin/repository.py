"""
Installed Plugin Repository.

Keeps track of the plugins present in the plugins directory.

Key features:
- Discovery of plugin directories (one manifest.json each)
- Lookup by key, with license/organization metadata
- Staging a plugin for removal (moved to the "uninstalled" directory)
"""

import shutil
import threading
from dataclasses import dataclass
from pathlib import Path

from corvid.log import get_logger
from corvid.plugin.manifest import MANIFEST_FILE, ManifestError, parse_manifest

logger = get_logger(__name__)


class PluginError(Exception):
    """Base exception for plugin-related errors."""

    pass


class PluginNotFoundError(PluginError):
    """Raised when a plugin key is not installed."""

    pass


@dataclass(frozen=True)
class PluginInfo:
    """
    Information about an installed plugin.

    Attributes:
        key: Plugin key
        version: Plugin version
        name: Display name
        license: License type, if declared
        organization: Publishing organization, if declared
        path: Plugin directory
    """

    key: str
    version: str
    name: str
    license: str | None
    organization: str | None
    path: Path


class PluginRepository:
    """
    Repository of installed plugins.

    The directory is scanned on first access and again after every
    uninstall or explicit refresh().
    """

    def __init__(self, plugins_dir: Path):
        self.plugins_dir = Path(plugins_dir)
        self._plugins: dict[str, PluginInfo] | None = None
        self._lock = threading.Lock()

        self.plugins_dir.mkdir(parents=True, exist_ok=True)

    def refresh(self) -> list[str]:
        """
        Rescan the plugins directory.

        Returns:
            Keys of the discovered plugins

        Raises:
            PluginError: If the directory cannot be listed
        """
        with self._lock:
            self._plugins = self._scan()
            return list(self._plugins)

    def _scan(self) -> dict[str, PluginInfo]:
        plugins: dict[str, PluginInfo] = {}

        try:
            plugin_dirs = sorted(p for p in self.plugins_dir.iterdir() if p.is_dir())
        except OSError as e:
            raise PluginError(f"Failed to list plugins in {self.plugins_dir}: {e}") from e

        for plugin_dir in plugin_dirs:
            manifest_path = plugin_dir / MANIFEST_FILE
            if not manifest_path.exists():
                continue

            try:
                manifest = parse_manifest(manifest_path)
            except ManifestError as e:
                logger.warning(f"Ignoring plugin directory {plugin_dir.name}: {e}")
                continue

            if manifest.key in plugins:
                logger.warning(
                    f"Plugin '{manifest.key}' found twice, ignoring {plugin_dir.name}"
                )
                continue

            plugins[manifest.key] = PluginInfo(
                key=manifest.key,
                version=manifest.version,
                name=manifest.name,
                license=manifest.license,
                organization=manifest.organization,
                path=plugin_dir,
            )

        return plugins

    def _loaded(self) -> dict[str, PluginInfo]:
        # Caller holds self._lock
        if self._plugins is None:
            self._plugins = self._scan()
        return self._plugins

    def get_plugin_infos(self) -> list[PluginInfo]:
        """List installed plugins with their metadata."""
        with self._lock:
            return list(self._loaded().values())

    def get_plugin_infos_by_keys(self) -> dict[str, PluginInfo]:
        with self._lock:
            return dict(self._loaded())

    def list_installed(self) -> set[str]:
        """Keys of the installed plugins."""
        with self._lock:
            return set(self._loaded())

    def get_plugin_info(self, key: str) -> PluginInfo | None:
        with self._lock:
            return self._loaded().get(key)

    def has_plugin(self, key: str) -> bool:
        with self._lock:
            return key in self._loaded()

    def uninstall(self, key: str, uninstalled_dir: Path) -> Path:
        """
        Stage an installed plugin for removal.

        The plugin directory is moved under uninstalled_dir, from which it can
        be restored until the server restarts.

        Returns:
            New location of the plugin directory

        Raises:
            PluginNotFoundError: If the plugin is not installed
            PluginError: If the directory cannot be moved
        """
        with self._lock:
            info = self._loaded().get(key)
            if info is None:
                raise PluginNotFoundError(f"Plugin not installed: {key}")

            uninstalled_dir = Path(uninstalled_dir)
            target = uninstalled_dir / info.path.name
            try:
                uninstalled_dir.mkdir(parents=True, exist_ok=True)
                if target.exists():
                    shutil.rmtree(target)
                shutil.move(str(info.path), str(target))
            except OSError as e:
                raise PluginError(f"Failed to uninstall plugin {key}: {e}") from e

            del self._plugins[key]
            return target

    def restore(self, uninstalled_dir: Path) -> list[str]:
        """
        Move every plugin staged in uninstalled_dir back into the plugins dir.

        Returns:
            Keys of the restored plugins
        """
        uninstalled_dir = Path(uninstalled_dir)
        if not uninstalled_dir.exists():
            return []

        restored = []
        with self._lock:
            for staged in sorted(p for p in uninstalled_dir.iterdir() if p.is_dir()):
                if (self.plugins_dir / staged.name).exists():
                    raise PluginError(
                        f"Cannot restore {staged.name}: already present in {self.plugins_dir}"
                    )
                try:
                    manifest = parse_manifest(staged / MANIFEST_FILE)
                    shutil.move(str(staged), str(self.plugins_dir / staged.name))
                except (ManifestError, OSError) as e:
                    raise PluginError(f"Failed to restore {staged.name}: {e}") from e
                restored.append(manifest.key)

            self._plugins = self._scan()

        return restored
