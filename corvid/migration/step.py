"""
Migration steps.

A step is a numbered, described DataChange. Data changes must be
idempotent: running one again on already migrated data has no effect.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from psycopg import Cursor


class MigrationError(Exception):
    """Base exception for migration errors."""

    pass


class DataChange(ABC):
    """A change applied to the data of an existing database."""

    @abstractmethod
    def execute(self, cursor: Cursor, now_ms: int) -> int:
        """
        Apply the change within the caller's transaction.

        Args:
            cursor: Cursor of the open transaction
            now_ms: Current time, in milliseconds since the epoch

        Returns:
            Number of affected rows
        """


@dataclass(frozen=True)
class MigrationStep:
    """
    Attributes:
        version: Unique, increasing step number
        description: What the step does
        change: The data change to run
    """

    version: int
    description: str
    change: DataChange
