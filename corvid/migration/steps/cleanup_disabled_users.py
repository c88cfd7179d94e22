"""
Remove credentials and external identities of disabled users.
"""

from psycopg import Cursor

from corvid.migration.step import DataChange

CLEANUP_SQL = """
UPDATE users
SET crypted_password = NULL,
    salt = NULL,
    email = NULL,
    external_identity = NULL,
    external_identity_provider = NULL,
    updated_at = %s
WHERE active = %s
  AND (crypted_password IS NOT NULL
       OR salt IS NOT NULL
       OR email IS NOT NULL
       OR external_identity IS NOT NULL
       OR external_identity_provider IS NOT NULL)
"""


class CleanupDisabledUsers(DataChange):
    """
    Null out the password, salt, email and external identity of every
    inactive user.

    Only rows still holding one of these values are updated, so updated_at
    is not touched again when the step is re-run.
    """

    def execute(self, cursor: Cursor, now_ms: int) -> int:
        cursor.execute(CLEANUP_SQL, (now_ms, False))
        return cursor.rowcount
