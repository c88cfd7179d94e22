"""
pm query command (-Q, -Qi).
"""

from typing import Any

from corvid.plugin.edition.installer import is_commercial_plugin
from corvid.services import Services


def query_command(args: Any) -> int:
    from pm.cli import PMError

    services = Services.from_config()
    try:
        repository = services.plugin_repository

        if args.info:
            if not args.targets:
                raise PMError("No plugin specified. Usage: pm -Qi <plugin>")
            for key in args.targets:
                info = repository.get_plugin_info(key)
                if info is None:
                    raise PMError(f"Plugin not installed: {key}")
                print(f"Key          : {info.key}")
                print(f"Name         : {info.name}")
                print(f"Version      : {info.version}")
                print(f"License      : {info.license or '-'}")
                print(f"Organization : {info.organization or '-'}")
                print(f"Commercial   : {'yes' if is_commercial_plugin(info) else 'no'}")
                print(f"Path         : {info.path}")
            return 0

        for info in sorted(repository.get_plugin_infos(), key=lambda i: i.key):
            if args.targets and info.key not in args.targets:
                continue
            marker = " [commercial]" if is_commercial_plugin(info) else ""
            print(f"{info.key} {info.version}{marker}")
    finally:
        services.close()
    return 0
