"""
User Service: the identity store

Async lookups and lifecycle operations for user accounts.
All lookups only return active users; deactivation is a soft delete.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.auth import hash_password, verify_password
from docflow.constants.roles import DEFAULT_USER_ROLE, UserRole
from docflow.exceptions import DuplicateResourceError, InvalidCredentialsError, UserNotFoundError
from docflow.models.base import utcnow
from docflow.models.user import User

logger = logging.getLogger(__name__)


async def get_user_by_id(user_id: int, db: AsyncSession) -> User | None:
    """Return an active user by primary key, or None."""
    result = await db.execute(select(User).where(User.id == user_id, User.is_active.is_(True)))
    return result.scalars().first()


async def get_user_by_email(email: str, db: AsyncSession) -> User | None:
    """Return an active user by email (case-insensitive), or None."""
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.lower(), User.is_active.is_(True))
    )
    return result.scalars().first()


async def create_user(
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    db: AsyncSession,
    role: UserRole = DEFAULT_USER_ROLE,
) -> User:
    """Register a new account. Fails with Conflict when the email is taken."""
    existing = await db.execute(select(User.id).where(func.lower(User.email) == email.lower()))
    if existing.scalar() is not None:
        raise DuplicateResourceError("User", "email", email)

    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email.lower(),
        hashed_password=hash_password(password),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User registered: id=%d email=%s", user.id, user.email)
    return user


async def authenticate_user(email: str, password: str, db: AsyncSession) -> User:
    """Verify credentials and stamp the last-login time."""
    user = await get_user_by_email(email, db)
    if user is None or not verify_password(password, user.hashed_password):
        logger.warning("Login failed for email: %s", email)
        raise InvalidCredentialsError()

    logger.info("User logged in: id=%d", user.id)
    return await update_last_login(user.id, db)


async def update_last_login(user_id: int, db: AsyncSession) -> User:
    user = await get_user_by_id(user_id, db)
    if user is None:
        raise UserNotFoundError(user_id)
    user.last_login_at = utcnow()
    await db.commit()
    await db.refresh(user)
    return user


async def list_users(db: AsyncSession, skip: int = 0, limit: int = 10) -> tuple[list[User], int]:
    """Return a page of active users (newest first) and the total count."""
    total = await db.execute(select(func.count(User.id)).where(User.is_active.is_(True)))
    result = await db.execute(
        select(User).where(User.is_active.is_(True)).order_by(User.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total.scalar_one()


async def deactivate_user(user_id: int, db: AsyncSession) -> User:
    """Soft-delete a user; the record is retained with is_active=False."""
    user = await get_user_by_id(user_id, db)
    if user is None:
        raise UserNotFoundError(user_id)
    user.is_active = False
    await db.commit()
    logger.info("User deactivated: id=%d", user.id)
    return user


async def assign_organization(user_id: int, organization_id: int | None, db: AsyncSession) -> User:
    """
    Set (or clear) the user's direct organization reference.

    This reference drives document visibility; it does not create or change
    any organization membership.
    """
    user = await get_user_by_id(user_id, db)
    if user is None:
        raise UserNotFoundError(user_id)

    if organization_id is not None:
        # Deferred import avoids circular dependency at module load time
        from docflow.services.organization_service import get_organization

        organization = await get_organization(organization_id, db)
        organization_id = organization.id

    user.organization_id = organization_id
    await db.commit()
    await db.refresh(user)
    logger.info("User %d direct organization set to %s", user.id, organization_id)
    return user
