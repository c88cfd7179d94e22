"""
Wiring of the edition management components from configuration.
"""

from dataclasses import dataclass
from pathlib import Path

import corvid.config
from corvid.edition.apply import LicenseApplier
from corvid.edition.state import EditionManagementState
from corvid.plugin.edition import (
    EditionInstaller,
    EditionInstallerExecutor,
    EditionPluginDownloader,
    EditionPluginUninstaller,
)
from corvid.plugin.repository import PluginRepository
from corvid.plugin.updatecenter import UpdateCenterGateway


@dataclass
class Services:
    plugin_repository: PluginRepository
    update_center: UpdateCenterGateway
    downloader: EditionPluginDownloader
    uninstaller: EditionPluginUninstaller
    executor: EditionInstallerExecutor
    installer: EditionInstaller
    state: EditionManagementState
    license_applier: LicenseApplier

    @classmethod
    def from_config(cls) -> "Services":
        """Build every component from the current configuration file."""
        plugins = corvid.config.get("plugins")
        updatecenter = corvid.config.get("updatecenter")

        repository = PluginRepository(Path(plugins.home))
        update_center = UpdateCenterGateway(
            url=updatecenter.url,
            activate=updatecenter.activate,
            timeout=updatecenter.timeout,
        )
        downloader = EditionPluginDownloader(
            Path(plugins.downloads), repository, timeout=updatecenter.timeout
        )
        uninstaller = EditionPluginUninstaller(repository, Path(plugins.uninstalled))
        executor = EditionInstallerExecutor()
        installer = EditionInstaller(
            downloader, uninstaller, repository, executor, update_center
        )
        state = EditionManagementState()

        return cls(
            plugin_repository=repository,
            update_center=update_center,
            downloader=downloader,
            uninstaller=uninstaller,
            executor=executor,
            installer=installer,
            state=state,
            license_applier=LicenseApplier(state, installer),
        )

    def close(self, wait: bool = True) -> None:
        """Stop the executor (waiting for a running installation) and HTTP clients."""
        self.executor.shutdown(wait=wait)
        self.downloader.close()
        self.update_center.close()
