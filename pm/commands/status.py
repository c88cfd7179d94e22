"""
pm status command (-T).
"""

from typing import Any

from corvid.edition.apply import StatusResponse


def print_status(response: StatusResponse) -> None:
    print(f"Current edition: {response.current_edition_key or '-'}")
    print(f"Next edition:    {response.next_edition_key or '-'}")
    print(f"Installation:    {response.installation_status.value}")


def status_command(args: Any) -> int:
    from corvid.edition.apply import LicenseApplier
    from corvid.services import Services

    services = Services.from_config()
    try:
        applier: LicenseApplier = services.license_applier
        print_status(applier.status())
        if args.verbose:
            for error in services.state.get_installation_errors():
                print(f"  error: {error}")
            print(f"Update center:   {'offline' if services.installer.is_offline() else 'online'}")
    finally:
        services.close()
    return 0
