"""
Edition installation - downloads and removes plugins to match an edition.
"""

from corvid.plugin.edition.downloader import EditionPluginDownloader
from corvid.plugin.edition.errors import (
    DownloadError,
    EditionInstallError,
    InstallationInProgressError,
)
from corvid.plugin.edition.executor import EditionInstallerExecutor
from corvid.plugin.edition.installer import (
    COMMERCIAL_LICENSE,
    COMMERCIAL_ORGANIZATION,
    EditionInstaller,
    is_commercial_plugin,
)
from corvid.plugin.edition.uninstaller import EditionPluginUninstaller

__all__ = [
    "COMMERCIAL_LICENSE",
    "COMMERCIAL_ORGANIZATION",
    "DownloadError",
    "EditionInstallError",
    "EditionInstaller",
    "EditionInstallerExecutor",
    "EditionPluginDownloader",
    "EditionPluginUninstaller",
    "InstallationInProgressError",
    "is_commercial_plugin",
]
