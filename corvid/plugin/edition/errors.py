"""
Exceptions raised while installing an edition.
"""


class EditionInstallError(Exception):
    """Base exception for edition installation errors."""

    pass


class InstallationInProgressError(EditionInstallError):
    """Raised when an installation is requested while another one runs."""

    pass


class DownloadError(EditionInstallError):
    """Raised when the plugins of an edition cannot be downloaded."""

    pass
