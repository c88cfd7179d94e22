"""
pm apply command (-A).

Apply a license: switch edition, downloading and removing plugins as needed.
"""

from typing import Any

from corvid.edition.license import License
from corvid.services import Services
from pm.commands.status import print_status


def apply_command(args: Any) -> int:
    """
    Execute apply command.

    The command waits for the background installation to finish, then
    prints the resulting status.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from pm.cli import PMError

    if not args.targets:
        raise PMError("No edition specified. Usage: pm -A <edition> [plugin ...]")

    edition_key, *plugin_keys = args.targets
    license = License.of(edition_key, plugin_keys)

    services = Services.from_config()
    try:
        response = services.license_applier.apply(license)
        if args.verbose:
            print_status(response)
    finally:
        services.close(wait=True)

    response = services.license_applier.status()
    print_status(response)

    if services.state.get_installation_errors():
        for error in services.state.get_installation_errors():
            print(f"  error: {error}")
        return 1
    return 0
