"""
pm migrate command (-M, -Ml).
"""

from typing import Any

from corvid.db import Database
from corvid.migration import MigrationRunner


def migrate_command(args: Any) -> int:
    with Database() as database:
        runner = MigrationRunner(database)

        if args.list:
            for step in runner.status():
                mark = "x" if step.applied else " "
                print(f"[{mark}] #{step.version} {step.description}")
            return 0

        executed = runner.run()

    if executed:
        print(f"Applied migration(s): {', '.join(f'#{v}' for v in executed)}")
    else:
        print("Database is up to date")
    return 0
