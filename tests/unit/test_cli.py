"""
Tests for the pm command line.

This test suite covers:
1. Help and default configuration generation
2. Applying a license without update center, status, cancel and finalize
3. Querying installed plugins
4. Error reporting
"""

import json
import tempfile
from pathlib import Path

import pytest

import corvid.config
from corvid.config.toml_handler import read_toml, write_toml
from pm.cli import main


@pytest.fixture
def workspace():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        config_file = root / "corvid.toml"
        write_toml(
            config_file,
            {
                "updatecenter": {"activate": False},
                "plugins": {
                    "home": str(root / "plugins"),
                    "downloads": str(root / "downloads"),
                    "uninstalled": str(root / "uninstalled"),
                },
            },
        )

        original = corvid.config.get_config_file()
        try:
            yield root, config_file
        finally:
            corvid.config.set_config_file(original)


def add_plugin(root: Path, key: str, **fields) -> None:
    plugin_dir = root / "plugins" / key
    plugin_dir.mkdir(parents=True)
    (plugin_dir / "manifest.json").write_text(
        json.dumps({"key": key, "version": "2.1", **fields})
    )


class TestHelp:
    """Test help and configuration commands."""

    def test_help(self, capsys):
        """-h prints usage."""
        assert main(["-h"]) == 0
        assert "pm -A <edition> [plugin ...]" in capsys.readouterr().out

    def test_no_operation_prints_help(self, capsys):
        """Without an operation, help is shown."""
        assert main([]) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_init_config(self, capsys):
        """--init-config writes a complete default configuration."""
        original = corvid.config.get_config_file()
        try:
            with tempfile.TemporaryDirectory() as tmpdir:
                target = Path(tmpdir) / "conf" / "corvid.toml"

                assert main(["--config", str(target), "--init-config"]) == 0

                assert "Configuration written" in capsys.readouterr().out
                data = read_toml(target)
                assert data["updatecenter"]["activate"] is True
                assert data["edition"]["pending_installation_status"] == "NONE"
        finally:
            corvid.config.set_config_file(original)


class TestEditionCommands:
    """Test apply, status and cancel."""

    def test_status_of_fresh_install(self, workspace, capsys):
        """A fresh platform has no edition."""
        _, config_file = workspace

        assert main(["--config", str(config_file), "-T"]) == 0

        out = capsys.readouterr().out
        assert "Current edition: -" in out
        assert "Installation:    NONE" in out

    def test_apply_without_change(self, workspace, capsys):
        """A license matching the installed plugins switches edition directly."""
        root, config_file = workspace
        add_plugin(root, "java")

        assert main(["--config", str(config_file), "-A", "developer", "java"]) == 0

        assert "Current edition: developer" in capsys.readouterr().out
        assert read_toml(config_file)["edition"]["current_edition_key"] == "developer"

    def test_apply_offline_then_cancel(self, workspace, capsys):
        """Offline, the install is manual; cancel resets it."""
        _, config_file = workspace

        assert main(["--config", str(config_file), "-A", "enterprise", "governance"]) == 0
        out = capsys.readouterr().out
        assert "Next edition:    enterprise" in out
        assert "Installation:    MANUAL_IN_PROGRESS" in out

        # A second license is refused while one is pending
        assert main(["--config", str(config_file), "-A", "developer"]) == 1
        assert "already in progress" in capsys.readouterr().err

        assert main(["--config", str(config_file), "-C"]) == 0
        assert "cancelled" in capsys.readouterr().out
        assert read_toml(config_file)["edition"]["pending_installation_status"] == "NONE"

    def test_apply_without_edition(self, workspace, capsys):
        """-A needs an edition."""
        _, config_file = workspace

        assert main(["--config", str(config_file), "-A"]) == 1
        assert "No edition specified" in capsys.readouterr().err


class TestQuery:
    """Test plugin queries."""

    def test_list_plugins(self, workspace, capsys):
        """-Q lists plugins and flags commercial ones."""
        root, config_file = workspace
        add_plugin(root, "java")
        add_plugin(root, "governance", license="Commercial", organization="Corvid")

        assert main(["--config", str(config_file), "-Q"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines == ["governance 2.1 [commercial]", "java 2.1"]

    def test_plugin_info(self, workspace, capsys):
        """-Qi shows plugin details."""
        root, config_file = workspace
        add_plugin(root, "governance", name="Governance", license="Commercial", organization="Corvid")

        assert main(["--config", str(config_file), "-Qi", "governance"]) == 0

        out = capsys.readouterr().out
        assert "Name         : Governance" in out
        assert "Commercial   : yes" in out

    def test_unknown_plugin(self, workspace, capsys):
        """-Qi on a missing plugin is an error."""
        _, config_file = workspace

        assert main(["--config", str(config_file), "-Qi", "ghost"]) == 1
        assert "Plugin not installed: ghost" in capsys.readouterr().err


class TestPendingInstallation:
    """Test cancel and finalize around a pending installation."""

    def test_cancel_refused_while_installing(self, workspace, capsys):
        """An installation recorded as running elsewhere is left alone."""
        root, config_file = workspace
        write_toml(
            config_file,
            {
                "edition": {
                    "pending_edition_key": "enterprise",
                    "pending_plugin_keys": ["governance"],
                    "pending_installation_status": "AUTOMATIC_IN_PROGRESS",
                }
            },
        )
        archive = root / "downloads" / "governance-1.0.zip"
        archive.parent.mkdir()
        archive.write_bytes(b"zip")

        assert main(["--config", str(config_file), "-C"]) == 1

        assert "An installation is running" in capsys.readouterr().out
        assert archive.exists()
        edition = read_toml(config_file)["edition"]
        assert edition["pending_installation_status"] == "AUTOMATIC_IN_PROGRESS"
        assert edition["pending_edition_key"] == "enterprise"

    def test_finalize_makes_pending_edition_current(self, workspace, capsys):
        """After the restart, the pending edition becomes the current one."""
        _, config_file = workspace
        assert main(["--config", str(config_file), "-A", "enterprise", "governance"]) == 0
        capsys.readouterr()

        assert main(["--config", str(config_file), "-F"]) == 0

        assert "Edition enterprise is now installed" in capsys.readouterr().out
        edition = read_toml(config_file)["edition"]
        assert edition["current_edition_key"] == "enterprise"
        assert edition["pending_installation_status"] == "NONE"

        # Licenses can be applied again
        assert main(["--config", str(config_file), "-A", "developer", "governance"]) == 0

    def test_finalize_after_ready(self, workspace, capsys):
        """An automatic installation that completed is finalized."""
        _, config_file = workspace
        write_toml(
            config_file,
            {
                "edition": {
                    "current_edition_key": "developer",
                    "pending_edition_key": "enterprise",
                    "pending_installation_status": "AUTOMATIC_READY",
                }
            },
        )

        assert main(["--config", str(config_file), "-F"]) == 0

        edition = read_toml(config_file)["edition"]
        assert edition["current_edition_key"] == "enterprise"
        assert edition["pending_edition_key"] == ""

    def test_finalize_clears_failure(self, workspace, capsys):
        """A failed installation is cleared, keeping the current edition."""
        _, config_file = workspace
        write_toml(
            config_file,
            {
                "edition": {
                    "current_edition_key": "developer",
                    "pending_edition_key": "enterprise",
                    "pending_installation_status": "AUTOMATIC_FAILURE",
                    "installation_errors": ["network down"],
                }
            },
        )

        assert main(["--config", str(config_file), "-F"]) == 0

        out = capsys.readouterr().out
        assert "error: network down" in out
        assert "Installation failure cleared" in out
        edition = read_toml(config_file)["edition"]
        assert edition["current_edition_key"] == "developer"
        assert edition["pending_installation_status"] == "NONE"
        assert edition["installation_errors"] == []

    def test_finalize_without_pending_installation(self, workspace, capsys):
        """Nothing pending is an error."""
        _, config_file = workspace

        assert main(["--config", str(config_file), "-F"]) == 1
        assert "Nothing to finalize" in capsys.readouterr().err
