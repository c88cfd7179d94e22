"""
Migration Runner.

Runs migration steps in version order and records each applied step in the
schema_migrations table, so that a step runs at most once per database.

Key features:
- Sequential execution by version number
- One transaction per step (a failed step leaves nothing behind and is
  retried on the next run)
- Injectable clock for deterministic timestamps
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from corvid.db import Database, DatabaseError
from corvid.log import get_logger
from corvid.migration.step import MigrationError, MigrationStep

logger = get_logger(__name__)


def system_now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class StepStatus:
    version: int
    description: str
    applied: bool


class MigrationRunner:
    def __init__(
        self,
        database: Database,
        steps: list[MigrationStep] | None = None,
        now_ms: Callable[[], int] = system_now_ms,
    ):
        """
        Args:
            database: Connected database
            steps: Steps to manage; the registered steps by default
            now_ms: Clock, in milliseconds since the epoch

        Raises:
            MigrationError: If two steps share a version
        """
        if steps is None:
            from corvid.migration.steps import STEPS

            steps = STEPS

        versions = [step.version for step in steps]
        if len(versions) != len(set(versions)):
            raise MigrationError(f"Duplicate migration versions in {sorted(versions)}")

        self._database = database
        self._steps = sorted(steps, key=lambda step: step.version)
        self._now_ms = now_ms

    def applied_versions(self) -> set[int]:
        rows = self._database.select("SELECT version FROM schema_migrations")
        return {row["version"] for row in rows}

    def pending(self) -> list[MigrationStep]:
        applied = self.applied_versions()
        return [step for step in self._steps if step.version not in applied]

    def status(self) -> list[StepStatus]:
        applied = self.applied_versions()
        return [
            StepStatus(step.version, step.description, step.version in applied)
            for step in self._steps
        ]

    def run(self) -> list[int]:
        """
        Run every pending step.

        Returns:
            Versions of the steps that ran

        Raises:
            MigrationError: If a step fails; steps after it are not run
        """
        executed = []

        for step in self.pending():
            logger.info(f"Running migration #{step.version}: {step.description}")
            now = self._now_ms()
            try:
                with self._database.transaction() as cur:
                    count = step.change.execute(cur, now)
                    cur.execute(
                        "INSERT INTO schema_migrations (version, description, applied_at) "
                        "VALUES (%s, %s, %s)",
                        (step.version, step.description, now),
                    )
            except DatabaseError as e:
                raise MigrationError(f"Migration #{step.version} failed: {e}") from e

            logger.info(f"Migration #{step.version} done, {count} row(s) updated")
            executed.append(step.version)

        return executed

    def run_step(self, step: MigrationStep) -> int:
        """
        Run one step's change regardless of the recorded history.

        Returns:
            Number of affected rows
        """
        try:
            with self._database.transaction() as cur:
                return step.change.execute(cur, self._now_ms())
        except DatabaseError as e:
            raise MigrationError(f"Migration #{step.version} failed: {e}") from e
