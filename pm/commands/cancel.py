"""
pm cancel command (-C).

Drop downloaded archives, restore plugins staged for removal and reset the
pending installation.
"""

from typing import Any

from corvid.edition.state import PendingStatus
from corvid.services import Services


def cancel_command(args: Any) -> int:
    services = Services.from_config()
    try:
        # The installation may be running in another pm process
        running = (
            services.installer.is_installing()
            or services.state.get_pending_installation_status()
            == PendingStatus.AUTOMATIC_IN_PROGRESS
        )
        if running:
            print("An installation is running, try again once it is done")
            return 1

        deleted = services.downloader.cancel_downloads()
        restored = services.uninstaller.cancel_uninstalls()

        services.state.cancel_installation()

        if args.verbose:
            print(f"Deleted {deleted} download(s), restored {len(restored)} plugin(s)")
        print("Pending installation cancelled")
    finally:
        services.close()
    return 0
