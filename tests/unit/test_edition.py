"""
Tests for Edition Management.

This test suite covers:
1. License values
2. Persistent edition state and its transitions
3. Applying a license (no change, automatic install, manual install)
4. Completion of the background installation
"""

import tempfile
import threading
from pathlib import Path
from unittest.mock import Mock

import pytest

from corvid.config.runtime import ConfigProxy
from corvid.config.sections import BUILTIN_SECTIONS
from corvid.edition import (
    BadRequestError,
    EditionManagementState,
    EditionStateError,
    License,
    LicenseApplier,
    PendingStatus,
)
from corvid.plugin.edition import InstallationInProgressError


@pytest.fixture
def config_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "corvid.toml"


@pytest.fixture
def state(config_file):
    return EditionManagementState(
        ConfigProxy("edition", BUILTIN_SECTIONS["edition"], config_file)
    )


LICENSE = License.of("enterprise", ["governance", "security"])


class TestLicense:
    """Test license values."""

    def test_plugin_keys_frozen(self):
        """Plugin keys are stored as a frozenset."""
        license = License("developer", ["java", "java", "cobol"])
        assert license.plugin_keys == frozenset({"java", "cobol"})
        assert License.of("developer", {"cobol", "java"}) == license

    def test_edition_required(self):
        """A license without edition is rejected."""
        with pytest.raises(ValueError, match="must name an edition"):
            License.of("", [])


class TestEditionManagementState:
    """Test edition state transitions."""

    def test_initial_state(self, state):
        """A fresh state has no edition and nothing pending."""
        assert state.get_current_edition_key() is None
        assert state.get_pending_edition_key() is None
        assert state.get_pending_plugin_keys() == frozenset()
        assert state.get_pending_installation_status() == PendingStatus.NONE
        assert state.get_installation_errors() == []

    def test_automatic_install_ready_then_finalize(self, state):
        """NONE -> AUTOMATIC_IN_PROGRESS -> AUTOMATIC_READY -> NONE."""
        assert state.start_automatic_install(LICENSE) == PendingStatus.AUTOMATIC_IN_PROGRESS
        assert state.get_pending_edition_key() == "enterprise"
        assert state.get_pending_plugin_keys() == {"governance", "security"}

        assert state.automatic_install_ready() == PendingStatus.AUTOMATIC_READY
        assert state.finalize_installation() == PendingStatus.NONE

        assert state.get_current_edition_key() == "enterprise"
        assert state.get_pending_edition_key() is None
        assert state.get_pending_plugin_keys() == frozenset()

    def test_automatic_install_failure(self, state):
        """A failure keeps its message until cleared."""
        state.start_automatic_install(LICENSE)

        assert state.installation_failed("network down") == PendingStatus.AUTOMATIC_FAILURE
        assert state.get_installation_errors() == ["network down"]

        assert state.clear_installation_failure() == PendingStatus.NONE
        assert state.get_installation_errors() == []
        assert state.get_pending_edition_key() is None

    def test_manual_install(self, state):
        """NONE -> MANUAL_IN_PROGRESS -> NONE."""
        state.start_manual_install(LICENSE)
        assert state.get_pending_installation_status() == PendingStatus.MANUAL_IN_PROGRESS

        state.finalize_installation()
        assert state.get_current_edition_key() == "enterprise"

    def test_new_edition_without_install(self, state):
        """The current edition switches directly."""
        assert state.new_edition_without_install("developer") == PendingStatus.NONE
        assert state.get_current_edition_key() == "developer"

        with pytest.raises(ValueError):
            state.new_edition_without_install("")

    def test_invalid_transitions(self, state):
        """Transitions from the wrong status are rejected."""
        with pytest.raises(EditionStateError, match="status is NONE"):
            state.automatic_install_ready()

        state.start_manual_install(LICENSE)
        with pytest.raises(EditionStateError, match="expected NONE"):
            state.start_automatic_install(LICENSE)
        with pytest.raises(EditionStateError):
            state.installation_failed("x")

    def test_cancel_installation(self, state):
        """Cancel resets any pending installation and keeps the current edition."""
        state.new_edition_without_install("developer")
        state.start_automatic_install(LICENSE)
        state.installation_failed("boom")

        assert state.cancel_installation() == PendingStatus.NONE

        assert state.get_current_edition_key() == "developer"
        assert state.get_pending_edition_key() is None
        assert state.get_installation_errors() == []

    def test_state_persisted(self, state, config_file):
        """A new state object on the same file sees the transitions."""
        state.start_automatic_install(LICENSE)

        reloaded = EditionManagementState(
            ConfigProxy("edition", BUILTIN_SECTIONS["edition"], config_file)
        )

        assert reloaded.get_pending_installation_status() == PendingStatus.AUTOMATIC_IN_PROGRESS
        assert reloaded.get_pending_plugin_keys() == {"governance", "security"}


class TestLicenseApplier:
    """Test applying licenses."""

    def make_installer(self, requires_change=True, online=True):
        installer = Mock()
        installer.requires_installation_change.return_value = requires_change
        installer.install.return_value = online
        return installer

    def test_no_change_switches_edition(self, state):
        """A license needing no plugin change switches edition immediately."""
        installer = self.make_installer(requires_change=False)
        applier = LicenseApplier(state, installer)

        response = applier.apply(LICENSE)

        installer.install.assert_not_called()
        assert response.current_edition_key == "enterprise"
        assert response.next_edition_key == ""
        assert response.installation_status == PendingStatus.NONE

    def test_online_starts_automatic_install(self, state):
        """With the update center reachable, the install runs in background."""
        installer = self.make_installer(online=True)
        applier = LicenseApplier(state, installer)

        response = applier.apply(LICENSE)

        assert installer.install.call_args.args[0] == LICENSE.plugin_keys
        assert response.installation_status == PendingStatus.AUTOMATIC_IN_PROGRESS
        assert response.to_dict() == {
            "nextEditionKey": "enterprise",
            "currentEditionKey": "",
            "installationStatus": "AUTOMATIC_IN_PROGRESS",
        }

    def test_offline_starts_manual_install(self, state):
        """Without update center, the administrator installs plugins manually."""
        applier = LicenseApplier(state, self.make_installer(online=False))

        response = applier.apply(LICENSE)

        assert response.installation_status == PendingStatus.MANUAL_IN_PROGRESS
        assert response.next_edition_key == "enterprise"

    def test_pending_installation_rejected(self, state):
        """A license can't be applied while another one is pending."""
        state.start_manual_install(LICENSE)
        applier = LicenseApplier(state, self.make_installer())

        with pytest.raises(BadRequestError, match="already in progress"):
            applier.apply(License.of("developer", []))

    def test_installer_busy_leaves_state(self, state):
        """An installer already running leaves the state untouched."""
        installer = self.make_installer()
        installer.install.side_effect = InstallationInProgressError("busy")
        applier = LicenseApplier(state, installer)

        with pytest.raises(InstallationInProgressError):
            applier.apply(LICENSE)

        assert state.get_pending_installation_status() == PendingStatus.NONE

    def test_completion_success(self, state):
        """A successful installation becomes AUTOMATIC_READY."""
        installer = self.make_installer()
        applier = LicenseApplier(state, installer)
        applier.apply(LICENSE)

        on_complete = installer.install.call_args.kwargs["on_complete"]
        on_complete(None)

        assert state.get_pending_installation_status() == PendingStatus.AUTOMATIC_READY

    def test_completion_failure(self, state):
        """A failed installation becomes AUTOMATIC_FAILURE with its message."""
        installer = self.make_installer()
        applier = LicenseApplier(state, installer)
        applier.apply(LICENSE)

        on_complete = installer.install.call_args.kwargs["on_complete"]
        on_complete(RuntimeError("download failed"))

        assert state.get_pending_installation_status() == PendingStatus.AUTOMATIC_FAILURE
        assert state.get_installation_errors() == ["download failed"]

    def test_completion_waits_for_recorded_state(self, state):
        """A task finishing before apply() records the install still lands."""
        installer = Mock()
        installer.requires_installation_change.return_value = True
        threads = []

        def install(keys, on_complete):
            thread = threading.Thread(target=on_complete, args=(None,))
            thread.start()
            threads.append(thread)
            return True

        installer.install.side_effect = install
        applier = LicenseApplier(state, installer)

        applier.apply(LICENSE)
        threads[0].join(timeout=5)

        assert state.get_pending_installation_status() == PendingStatus.AUTOMATIC_READY
