"""
Edition Installer.

Brings the installed plugins in line with the plugins of an edition:
missing plugins are downloaded, then installed commercial plugins that the
edition does not include are staged for removal.

Only one installation may run at a time. install() takes the installation
lock without waiting and hands the work over to the executor; the lock is
released by the background task when it ends, whatever its outcome.
"""

import threading
from collections.abc import Callable, Iterable

from corvid.log import get_logger
from corvid.plugin.edition.downloader import EditionPluginDownloader
from corvid.plugin.edition.errors import InstallationInProgressError
from corvid.plugin.edition.executor import EditionInstallerExecutor
from corvid.plugin.edition.uninstaller import EditionPluginUninstaller
from corvid.plugin.repository import PluginInfo, PluginRepository
from corvid.plugin.updatecenter import Catalog, UpdateCenterGateway

logger = get_logger(__name__)

COMMERCIAL_LICENSE = "Commercial"
COMMERCIAL_ORGANIZATION = "Corvid"


def is_commercial_plugin(plugin_info: PluginInfo) -> bool:
    """Whether a plugin is one of the vendor's commercially-licensed plugins."""
    return (
        plugin_info.license == COMMERCIAL_LICENSE
        and plugin_info.organization == COMMERCIAL_ORGANIZATION
    )


class EditionInstaller:
    def __init__(
        self,
        downloader: EditionPluginDownloader,
        uninstaller: EditionPluginUninstaller,
        plugin_repository: PluginRepository,
        executor: EditionInstallerExecutor,
        update_center: UpdateCenterGateway,
    ):
        self._downloader = downloader
        self._uninstaller = uninstaller
        self._repository = plugin_repository
        self._executor = executor
        self._update_center = update_center
        self._lock = threading.Lock()

    def install(
        self,
        edition_plugin_keys: Iterable[str],
        on_complete: Callable[[BaseException | None], None] | None = None,
    ) -> bool:
        """
        Refresh the update center catalog and start installing the edition
        in the background.

        Args:
            edition_plugin_keys: Keys of the plugins making up the edition
            on_complete: Called from the background task once it ends, with
                the error that made it fail or None; the installation lock
                is still held during the call

        Returns:
            True if the installation task was submitted, False if the update
            center is unavailable (nothing was submitted)

        Raises:
            InstallationInProgressError: If another installation is running
        """
        edition_plugin_keys = frozenset(edition_plugin_keys)

        if not self._lock.acquire(blocking=False):
            logger.warning("Edition installation rejected: another one is running")
            raise InstallationInProgressError(
                "Another installation of an edition is already running"
            )

        submitted = False
        try:
            catalog = self._update_center.get_catalog(force_refresh=True)
            if catalog is None:
                logger.info("Update center unavailable, edition must be installed manually")
                return False

            to_install = self._plugins_to_install(edition_plugin_keys)
            to_remove = self._plugins_to_remove(edition_plugin_keys)
            logger.info(
                f"Installing edition: {len(to_install)} plugin(s) to download, "
                f"{len(to_remove)} to remove"
            )

            self._executor.submit(
                lambda: self._async_install(to_install, to_remove, catalog, on_complete)
            )
            submitted = True
            return True
        finally:
            if not submitted:
                self._lock.release()

    def requires_installation_change(self, edition_plugin_keys: Iterable[str]) -> bool:
        """Whether installing the edition would add or remove any plugin."""
        edition_plugin_keys = frozenset(edition_plugin_keys)
        return bool(
            self._plugins_to_install(edition_plugin_keys)
            or self._plugins_to_remove(edition_plugin_keys)
        )

    def is_offline(self) -> bool:
        """True when the update center catalog cannot be obtained."""
        return self._update_center.get_catalog(force_refresh=True) is None

    def is_installing(self) -> bool:
        return self._lock.locked()

    def _async_install(
        self,
        to_install: frozenset[str],
        to_remove: frozenset[str],
        catalog: Catalog,
        on_complete: Callable[[BaseException | None], None] | None,
    ) -> None:
        error: BaseException | None = None
        try:
            # New plugins first, so that no window exists without either
            self._downloader.install_edition(to_install, catalog)

            failed = [key for key in sorted(to_remove) if not self._uninstaller.uninstall(key)]
            if failed:
                logger.warning(f"Plugins not uninstalled: {', '.join(failed)}")
        except BaseException as e:
            error = e
            raise
        finally:
            try:
                if on_complete is not None:
                    on_complete(error)
            finally:
                self._lock.release()

    def _plugins_to_install(self, edition_plugin_keys: frozenset[str]) -> frozenset[str]:
        installed_keys = self._repository.list_installed()
        return frozenset(key for key in edition_plugin_keys if key not in installed_keys)

    def _plugins_to_remove(self, edition_plugin_keys: frozenset[str]) -> frozenset[str]:
        installed_commercial_keys = {
            info.key for info in self._repository.get_plugin_infos() if is_commercial_plugin(info)
        }
        return frozenset(
            key for key in installed_commercial_keys if key not in edition_plugin_keys
        )
