"""
Membership Service

Organization-scoped roles: who belongs to which organization and with what
role. Every guarded operation declares the exact set of roles it accepts
(see ``docflow.constants.roles``); roles are not ranked.

Memberships are never physically removed. Removal flips ``is_active`` and all
lookups filter on active rows.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.constants.roles import (
    DEFAULT_MEMBER_ROLE,
    MANAGE_MEMBERS,
    READ_ORGANIZATION,
    WRITE_DOCUMENTS,
    MemberRole,
)
from docflow.exceptions import (
    AuthorizationError,
    DuplicateResourceError,
    MembershipNotFoundError,
    UserNotFoundError,
)
from docflow.models.organization import Organization, OrganizationMember
from docflow.services.user_service import get_user_by_id

logger = logging.getLogger(__name__)


async def get_active_membership(
    organization_id: int,
    user_id: int,
    db: AsyncSession,
) -> OrganizationMember | None:
    """Return the single active membership for (user, organization), or None."""
    result = await db.execute(
        select(OrganizationMember).where(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.user_id == user_id,
            OrganizationMember.is_active.is_(True),
        )
    )
    return result.scalars().first()


async def check_permission(
    organization_id: int,
    user_id: int,
    allowed_roles: Iterable[MemberRole],
    db: AsyncSession,
) -> OrganizationMember:
    """
    Require an active membership whose role is in ``allowed_roles``.

    Returns the caller's membership on success.

    Raises:
        AuthorizationError: no active membership, or its role is not allowed.
    """
    allowed = frozenset(allowed_roles)
    membership = await get_active_membership(organization_id, user_id, db)
    if membership is None or membership.role not in allowed:
        logger.warning(
            "Permission denied: user=%d org=%d role=%s allowed=%s",
            user_id,
            organization_id,
            membership.role.value if membership else None,
            sorted(r.value for r in allowed),
        )
        raise AuthorizationError(
            "Insufficient permissions in organization",
            required_roles=sorted(r.value for r in allowed),
        )
    return membership


def create_owner_membership(organization: Organization, user_id: int, db: AsyncSession) -> OrganizationMember:
    """
    Stage the owner membership for a freshly created organization.

    Only ``create_organization_with_owner`` calls this; it owns the commit.
    """
    member = OrganizationMember(
        organization_id=organization.id,
        user_id=user_id,
        role=MemberRole.OWNER,
        is_active=True,
    )
    db.add(member)
    return member


async def add_member(
    organization_id: int,
    user_id: int,
    added_by_id: int,
    db: AsyncSession,
    role: MemberRole = DEFAULT_MEMBER_ROLE,
) -> OrganizationMember:
    """Add ``user_id`` to the organization. Caller must be owner or admin."""
    await check_permission(organization_id, added_by_id, MANAGE_MEMBERS, db)

    if role == MemberRole.OWNER:
        raise AuthorizationError("The owner role can only be assigned when the organization is created")

    user = await get_user_by_id(user_id, db)
    if user is None:
        raise UserNotFoundError(user_id)

    if await get_active_membership(organization_id, user_id, db) is not None:
        raise DuplicateResourceError("Membership", "user_id", user_id)

    member = OrganizationMember(
        organization_id=organization_id,
        user_id=user_id,
        role=role,
        is_active=True,
    )
    db.add(member)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent add for the same pair won the race on the partial unique index
        await db.rollback()
        raise DuplicateResourceError("Membership", "user_id", user_id)
    await db.refresh(member)
    logger.info("Member added: org=%d user=%d role=%s by=%d", organization_id, user_id, role.value, added_by_id)
    return member


async def _get_member_row(organization_id: int, member_id: int, db: AsyncSession) -> OrganizationMember:
    result = await db.execute(
        select(OrganizationMember).where(
            OrganizationMember.id == member_id,
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.is_active.is_(True),
        )
    )
    member = result.scalars().first()
    if member is None:
        raise MembershipNotFoundError(member_id)
    return member


async def update_member_role(
    organization_id: int,
    member_id: int,
    new_role: MemberRole,
    updated_by_id: int,
    db: AsyncSession,
) -> OrganizationMember:
    """Change a member's role. Caller must be owner or admin."""
    await check_permission(organization_id, updated_by_id, MANAGE_MEMBERS, db)
    member = await _get_member_row(organization_id, member_id, db)

    if new_role == MemberRole.OWNER or member.role == MemberRole.OWNER:
        raise AuthorizationError("The owner role cannot be granted or changed")

    member.role = new_role
    await db.commit()
    await db.refresh(member)
    logger.info("Member role updated: org=%d member=%d role=%s by=%d", organization_id, member_id, new_role.value, updated_by_id)
    return member


async def remove_member(
    organization_id: int,
    member_id: int,
    removed_by_id: int,
    db: AsyncSession,
) -> OrganizationMember:
    """Soft-delete a membership. Owners can never be removed this way."""
    await check_permission(organization_id, removed_by_id, MANAGE_MEMBERS, db)
    member = await _get_member_row(organization_id, member_id, db)

    if member.role == MemberRole.OWNER:
        logger.warning("Refused to remove owner membership: org=%d member=%d", organization_id, member_id)
        raise AuthorizationError("Cannot remove organization owner")

    member.is_active = False
    await db.commit()
    await db.refresh(member)
    logger.info("Member removed: org=%d member=%d by=%d", organization_id, member_id, removed_by_id)
    return member


async def list_members(
    organization_id: int,
    requested_by_id: int,
    db: AsyncSession,
) -> list[OrganizationMember]:
    """Active members of an organization, oldest first. Any member may list."""
    await check_permission(organization_id, requested_by_id, READ_ORGANIZATION, db)
    result = await db.execute(
        select(OrganizationMember)
        .where(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.is_active.is_(True),
        )
        .order_by(OrganizationMember.joined_at, OrganizationMember.id)
    )
    return list(result.scalars().all())


async def get_user_organizations(
    user_id: int,
    db: AsyncSession,
    roles: Iterable[MemberRole] = READ_ORGANIZATION,
) -> list[tuple[Organization, MemberRole]]:
    """Active organizations where the user holds an active membership with one of ``roles``."""
    result = await db.execute(
        select(Organization, OrganizationMember.role)
        .join(OrganizationMember, Organization.id == OrganizationMember.organization_id)
        .where(
            OrganizationMember.user_id == user_id,
            OrganizationMember.is_active.is_(True),
            OrganizationMember.role.in_(list(roles)),
            Organization.is_active.is_(True),
        )
        .order_by(Organization.name)
    )
    return [(organization, role) for organization, role in result.all()]


async def get_writable_organizations(user_id: int, db: AsyncSession) -> list[tuple[Organization, MemberRole]]:
    """Organizations where the user may create documents."""
    return await get_user_organizations(user_id, db, roles=WRITE_DOCUMENTS)
