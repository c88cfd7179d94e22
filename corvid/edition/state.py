"""
Edition Management State.

Tracks the installed edition and the progress of the installation of a new
one. The state is kept in the [edition] section of the configuration file so
that it survives restarts; every transition is flushed immediately.

Transitions of the pending installation status:

    NONE -> AUTOMATIC_IN_PROGRESS -> AUTOMATIC_READY -> NONE
                                  -> AUTOMATIC_FAILURE -> NONE
    NONE -> MANUAL_IN_PROGRESS -> NONE
    NONE -> NONE                  (new edition, no plugin change)
    any  -> NONE                  (cancel_installation)
"""

import threading
from enum import Enum

from corvid.config.runtime import ConfigProxy
from corvid.edition.license import License


class EditionStateError(Exception):
    """Raised on a transition not allowed from the current status."""

    pass


class PendingStatus(Enum):
    NONE = "NONE"
    AUTOMATIC_IN_PROGRESS = "AUTOMATIC_IN_PROGRESS"
    AUTOMATIC_READY = "AUTOMATIC_READY"
    AUTOMATIC_FAILURE = "AUTOMATIC_FAILURE"
    MANUAL_IN_PROGRESS = "MANUAL_IN_PROGRESS"


class EditionManagementState:
    """Persistent, thread-safe edition management state."""

    def __init__(self, proxy: ConfigProxy | None = None):
        """
        Args:
            proxy: Accessor of the [edition] section; defaults to the one of
                the current configuration file
        """
        if proxy is None:
            import corvid.config

            proxy = corvid.config.get("edition")

        self._cfg = proxy
        self._lock = threading.RLock()

    # Queries

    def get_current_edition_key(self) -> str | None:
        return self._cfg.current_edition_key or None

    def get_pending_edition_key(self) -> str | None:
        return self._cfg.pending_edition_key or None

    def get_pending_plugin_keys(self) -> frozenset[str]:
        return frozenset(self._cfg.pending_plugin_keys)

    def get_pending_installation_status(self) -> PendingStatus:
        return PendingStatus(self._cfg.pending_installation_status)

    def get_installation_errors(self) -> list[str]:
        return list(self._cfg.installation_errors)

    # Transitions

    def start_automatic_install(self, license: License) -> PendingStatus:
        with self._lock:
            self._check_status(PendingStatus.NONE)
            self._start(license, PendingStatus.AUTOMATIC_IN_PROGRESS)
            return PendingStatus.AUTOMATIC_IN_PROGRESS

    def start_manual_install(self, license: License) -> PendingStatus:
        with self._lock:
            self._check_status(PendingStatus.NONE)
            self._start(license, PendingStatus.MANUAL_IN_PROGRESS)
            return PendingStatus.MANUAL_IN_PROGRESS

    def new_edition_without_install(self, edition_key: str) -> PendingStatus:
        """Switch edition directly; the installed plugins already match it."""
        if not edition_key:
            raise ValueError("edition_key can't be empty")

        with self._lock:
            self._check_status(PendingStatus.NONE)
            self._cfg.update(
                current_edition_key=edition_key,
                pending_edition_key="",
                pending_plugin_keys=[],
                installation_errors=[],
            )
            return PendingStatus.NONE

    def automatic_install_ready(self) -> PendingStatus:
        with self._lock:
            self._check_status(PendingStatus.AUTOMATIC_IN_PROGRESS)
            self._cfg.pending_installation_status = PendingStatus.AUTOMATIC_READY.value
            return PendingStatus.AUTOMATIC_READY

    def installation_failed(self, message: str | None = None) -> PendingStatus:
        with self._lock:
            self._check_status(PendingStatus.AUTOMATIC_IN_PROGRESS)
            errors = self.get_installation_errors()
            if message:
                errors.append(message)
            self._cfg.update(
                pending_installation_status=PendingStatus.AUTOMATIC_FAILURE.value,
                installation_errors=errors,
            )
            return PendingStatus.AUTOMATIC_FAILURE

    def finalize_installation(self) -> PendingStatus:
        """The pending edition becomes the current one (after a restart)."""
        with self._lock:
            self._check_status(PendingStatus.AUTOMATIC_READY, PendingStatus.MANUAL_IN_PROGRESS)
            self._cfg.update(
                current_edition_key=self._cfg.pending_edition_key,
                pending_edition_key="",
                pending_plugin_keys=[],
                pending_installation_status=PendingStatus.NONE.value,
            )
            return PendingStatus.NONE

    def clear_installation_failure(self) -> PendingStatus:
        with self._lock:
            self._check_status(PendingStatus.AUTOMATIC_FAILURE)
            self._cfg.update(
                pending_edition_key="",
                pending_plugin_keys=[],
                pending_installation_status=PendingStatus.NONE.value,
                installation_errors=[],
            )
            return PendingStatus.NONE

    def cancel_installation(self) -> PendingStatus:
        """Drop the pending edition whatever its status; the current one stays."""
        with self._lock:
            self._cfg.update(
                pending_edition_key="",
                pending_plugin_keys=[],
                pending_installation_status=PendingStatus.NONE.value,
                installation_errors=[],
            )
            return PendingStatus.NONE

    def _start(self, license: License, status: PendingStatus) -> None:
        self._cfg.update(
            pending_edition_key=license.edition_key,
            pending_plugin_keys=sorted(license.plugin_keys),
            pending_installation_status=status.value,
            installation_errors=[],
        )

    def _check_status(self, *allowed: PendingStatus) -> None:
        current = self.get_pending_installation_status()
        if current not in allowed:
            expected = " or ".join(s.value for s in allowed)
            raise EditionStateError(
                f"Can't change edition state: status is {current.value}, expected {expected}"
            )
