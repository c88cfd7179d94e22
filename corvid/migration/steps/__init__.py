"""
Registered migration steps, in execution order.
"""

from corvid.migration.step import MigrationStep
from corvid.migration.steps.cleanup_disabled_users import CleanupDisabledUsers

STEPS: list[MigrationStep] = [
    MigrationStep(1, "Clean up disabled users", CleanupDisabledUsers()),
]

__all__ = ["STEPS", "CleanupDisabledUsers"]
