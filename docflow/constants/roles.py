"""
Role Constants for DocFlow

Two independent authorization axes live here:

* ``UserRole`` is the global role stored on every user. Document visibility
  and editing rules read it together with the user's direct organization.
* ``MemberRole`` is the role of a user inside one organization, stored on the
  membership row. Organization and member management read it.

The two are never compared with each other, and neither is ordered: every
operation names the exact set of roles it accepts.
"""

from enum import Enum


class UserRole(str, Enum):
    """Global role of a user account."""

    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class MemberRole(str, Enum):
    """Role of a user within a single organization."""

    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


# Default roles for new records
DEFAULT_USER_ROLE = UserRole.VIEWER
DEFAULT_MEMBER_ROLE = MemberRole.VIEWER

# Membership role sets, one per operation
MANAGE_MEMBERS = frozenset({MemberRole.OWNER, MemberRole.ADMIN})
UPDATE_ORGANIZATION = frozenset({MemberRole.OWNER, MemberRole.ADMIN})
DELETE_ORGANIZATION = frozenset({MemberRole.OWNER})
WRITE_DOCUMENTS = frozenset({MemberRole.OWNER, MemberRole.ADMIN, MemberRole.EDITOR})
READ_ORGANIZATION = frozenset({MemberRole.OWNER, MemberRole.ADMIN, MemberRole.EDITOR, MemberRole.VIEWER})
