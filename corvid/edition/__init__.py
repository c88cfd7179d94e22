"""
Edition management - licenses, edition state and license application.
"""

from corvid.edition.apply import BadRequestError, LicenseApplier, StatusResponse
from corvid.edition.license import License
from corvid.edition.state import EditionManagementState, EditionStateError, PendingStatus

__all__ = [
    "BadRequestError",
    "EditionManagementState",
    "EditionStateError",
    "License",
    "LicenseApplier",
    "PendingStatus",
    "StatusResponse",
]
