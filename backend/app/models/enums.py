"""
User roles enumeration.

Defines the role types for the donation ledger.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Full access, including deletes and amount/date corrections
        OPERATOR: Records entries and payments, may only correct payment mode/proof
        VIEWER: Read-only access (donors are created with this role)
    """
    ADMIN = "admin"
    OPERATOR = "operator"
    VIEWER = "viewer"
