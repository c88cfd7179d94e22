"""
Database migrations.

Each step is a numbered, idempotent data change; MigrationRunner applies
the pending ones and records them in schema_migrations.
"""

from corvid.migration.runner import MigrationRunner, StepStatus
from corvid.migration.step import DataChange, MigrationError, MigrationStep

__all__ = [
    "DataChange",
    "MigrationError",
    "MigrationRunner",
    "MigrationStep",
    "StepStatus",
]
