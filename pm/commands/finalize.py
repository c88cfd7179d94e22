"""
pm finalize command (-F).

Run once the server has restarted on the plugins of a new edition: the
pending edition becomes the current one. After a failed automatic
installation, the failure is cleared so that a license can be applied again.
"""

from typing import Any

from corvid.edition.state import PendingStatus
from corvid.services import Services
from pm.commands.status import print_status


def finalize_command(args: Any) -> int:
    from pm.cli import PMError

    services = Services.from_config()
    try:
        state = services.state
        status = state.get_pending_installation_status()

        if status in (PendingStatus.AUTOMATIC_READY, PendingStatus.MANUAL_IN_PROGRESS):
            state.finalize_installation()
            print(f"Edition {state.get_current_edition_key()} is now installed")
        elif status == PendingStatus.AUTOMATIC_FAILURE:
            for error in state.get_installation_errors():
                print(f"  error: {error}")
            state.clear_installation_failure()
            print("Installation failure cleared")
        else:
            raise PMError(f"Nothing to finalize: installation status is {status.value}")

        if args.verbose:
            print_status(services.license_applier.status())
    finally:
        services.close()
    return 0
