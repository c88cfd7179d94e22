"""
Apply a license to the server.

Changes the installed plugins to match the edition granted by a license and
records the progress in the edition management state.
"""

import threading
from dataclasses import dataclass

from corvid.edition.license import License
from corvid.edition.state import EditionManagementState, PendingStatus
from corvid.log import get_logger
from corvid.plugin.edition.installer import EditionInstaller

logger = get_logger(__name__)


class BadRequestError(Exception):
    """Raised when a license cannot be applied in the current state."""

    pass


@dataclass(frozen=True)
class StatusResponse:
    """
    Edition status reported after applying a license.

    Attributes:
        next_edition_key: Edition being installed ("" if none)
        current_edition_key: Edition currently installed ("" if none)
        installation_status: Pending installation status
    """

    next_edition_key: str
    current_edition_key: str
    installation_status: PendingStatus

    def to_dict(self) -> dict[str, str]:
        return {
            "nextEditionKey": self.next_edition_key,
            "currentEditionKey": self.current_edition_key,
            "installationStatus": self.installation_status.value,
        }


class LicenseApplier:
    def __init__(self, state: EditionManagementState, installer: EditionInstaller):
        self._state = state
        self._installer = installer

    def apply(self, license: License) -> StatusResponse:
        """
        Apply a license.

        When the installed plugins already match the edition, the edition is
        switched immediately. Otherwise the installation is started in the
        background, or left to the administrator when the update center
        cannot be reached.

        Raises:
            BadRequestError: If an installation is already pending
            InstallationInProgressError: If the installer is busy
        """
        if self._state.get_pending_installation_status() != PendingStatus.NONE:
            raise BadRequestError("Can't apply a license when applying one is already in progress")

        if not self._installer.requires_installation_change(license.plugin_keys):
            logger.info(f"Edition {license.edition_key} requires no plugin change")
            self._state.new_edition_without_install(license.edition_key)
        else:
            # The background task must not report before the install is recorded
            recorded = threading.Event()

            def on_complete(error: BaseException | None) -> None:
                recorded.wait()
                self._on_install_complete(error)

            try:
                online = self._installer.install(license.plugin_keys, on_complete=on_complete)
                if online:
                    logger.info(f"Installing edition {license.edition_key}")
                    self._state.start_automatic_install(license)
                else:
                    logger.info(f"Edition {license.edition_key} must be installed manually")
                    self._state.start_manual_install(license)
            finally:
                recorded.set()

        return self.status()

    def status(self) -> StatusResponse:
        return StatusResponse(
            next_edition_key=self._state.get_pending_edition_key() or "",
            current_edition_key=self._state.get_current_edition_key() or "",
            installation_status=self._state.get_pending_installation_status(),
        )

    def _on_install_complete(self, error: BaseException | None) -> None:
        if error is None:
            self._state.automatic_install_ready()
        else:
            self._state.installation_failed(str(error) or type(error).__name__)
