"""
Organization Service

Async CRUD for organizations (tenants), subdomain validation and the public
projection served on organization subdomains.
All functions accept an injected AsyncSession.
"""

import logging
import re
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.constants.roles import DELETE_ORGANIZATION, READ_ORGANIZATION, UPDATE_ORGANIZATION
from docflow.constants.subdomains import (
    ORGANIZATION_RESERVED_SUBDOMAINS,
    SUBDOMAIN_MAX_LENGTH,
    SUBDOMAIN_MIN_LENGTH,
    SUBDOMAIN_PATTERN,
)
from docflow.exceptions import DuplicateResourceError, InvalidSubdomainError, OrganizationNotFoundError
from docflow.models.document import Document
from docflow.models.organization import Organization
from docflow.services.membership_service import check_permission, create_owner_membership

logger = logging.getLogger(__name__)

_SUBDOMAIN_RE = re.compile(SUBDOMAIN_PATTERN)

UPDATABLE_FIELDS = {"name", "subdomain", "custom_domain", "description", "website", "logo", "is_public"}

# Non-nullable columns; an explicit null leaves them unchanged
REQUIRED_FIELDS = {"name", "is_public"}


def is_valid_subdomain(subdomain: str) -> bool:
    """
    Check an organization subdomain name.

    Valid names are 3-63 characters of lowercase letters, digits and inner
    hyphens, and are not on the organization reserved list. Input is
    lowercased before checking.
    """
    candidate = subdomain.lower()
    return (
        bool(_SUBDOMAIN_RE.fullmatch(candidate))
        and candidate not in ORGANIZATION_RESERVED_SUBDOMAINS
        and SUBDOMAIN_MIN_LENGTH <= len(candidate) <= SUBDOMAIN_MAX_LENGTH
    )


async def _ensure_subdomain_available(
    subdomain: str,
    db: AsyncSession,
    exclude_id: int | None = None,
) -> str:
    """Validate and normalise a subdomain, raising Conflict when invalid or taken."""
    if not is_valid_subdomain(subdomain):
        raise InvalidSubdomainError(subdomain)

    normalised = subdomain.lower()
    query = select(Organization.id).where(func.lower(Organization.subdomain) == normalised)
    if exclude_id is not None:
        query = query.where(Organization.id != exclude_id)
    existing = await db.execute(query)
    if existing.scalar() is not None:
        raise DuplicateResourceError("Organization", "subdomain", normalised)
    return normalised


async def create_organization_with_owner(
    name: str,
    subdomain: str,
    owner_id: int,
    db: AsyncSession,
    description: str | None = None,
    website: str | None = None,
    is_public: bool = True,
) -> Organization:
    """
    Create an organization and make ``owner_id`` its owner.

    Both rows are written in one transaction: if the owner membership cannot
    be inserted, the organization is not created either.
    """
    normalised = await _ensure_subdomain_available(subdomain, db)

    organization = Organization(
        name=name,
        subdomain=normalised,
        description=description,
        website=website,
        is_public=is_public,
        is_active=True,
    )
    db.add(organization)
    try:
        await db.flush()
        create_owner_membership(organization, owner_id, db)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateResourceError("Organization", "subdomain", normalised)

    await db.refresh(organization)
    logger.info("Organization created: id=%d subdomain=%s owner=%d", organization.id, organization.subdomain, owner_id)
    return organization


async def get_organization(organization_id: int, db: AsyncSession) -> Organization:
    """Return an active organization or raise NotFound."""
    result = await db.execute(
        select(Organization).where(Organization.id == organization_id, Organization.is_active.is_(True))
    )
    organization = result.scalars().first()
    if organization is None:
        raise OrganizationNotFoundError(organization_id)
    return organization


async def get_organization_for_member(organization_id: int, user_id: int, db: AsyncSession) -> Organization:
    """Return an organization the user is an active member of."""
    organization = await get_organization(organization_id, db)
    await check_permission(organization_id, user_id, READ_ORGANIZATION, db)
    return organization


async def get_organization_by_subdomain(subdomain: str, db: AsyncSession) -> Organization | None:
    """Return an active organization by subdomain (case-insensitive), or None."""
    result = await db.execute(
        select(Organization).where(
            Organization.subdomain == subdomain.lower(),
            Organization.is_active.is_(True),
        )
    )
    return result.scalars().first()


async def list_organizations(db: AsyncSession, skip: int = 0, limit: int = 20) -> list[Organization]:
    """Return a page of active organizations ordered by name."""
    result = await db.execute(
        select(Organization)
        .where(Organization.is_active.is_(True))
        .order_by(Organization.name)
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


async def update_organization(
    organization_id: int,
    updates: dict[str, Any],
    updated_by_id: int,
    db: AsyncSession,
) -> Organization:
    """
    Apply a partial update. Caller must be owner or admin.

    Only keys present in ``updates`` are changed. A changed subdomain is
    validated and checked for uniqueness the same way as on creation. A
    null name or visibility flag is ignored.
    """
    organization = await get_organization(organization_id, db)
    await check_permission(organization_id, updated_by_id, UPDATE_ORGANIZATION, db)
    updates = dict(updates)

    new_subdomain = updates.get("subdomain")
    if new_subdomain is not None and new_subdomain.lower() != organization.subdomain:
        updates["subdomain"] = await _ensure_subdomain_available(new_subdomain, db, exclude_id=organization.id)
    else:
        updates.pop("subdomain", None)

    updates = {
        field: value
        for field, value in updates.items()
        if field in UPDATABLE_FIELDS and not (value is None and field in REQUIRED_FIELDS)
    }
    for field, value in updates.items():
        setattr(organization, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if "subdomain" not in updates:
            raise
        raise DuplicateResourceError("Organization", "subdomain", updates["subdomain"])
    await db.refresh(organization)
    logger.info("Organization updated: id=%d fields=%s", organization.id, sorted(updates))
    return organization


async def delete_organization(organization_id: int, deleted_by_id: int, db: AsyncSession) -> Organization:
    """Soft-delete an organization (is_active=False). Owner only."""
    organization = await get_organization(organization_id, db)
    await check_permission(organization_id, deleted_by_id, DELETE_ORGANIZATION, db)
    organization.is_active = False
    await db.commit()
    logger.info("Organization soft-deleted: id=%d subdomain=%s", organization.id, organization.subdomain)
    return organization


# ── Public projection ──────────────────────────────────────────────────────────


def is_publicly_listed(document: Document) -> bool:
    """Documents shown on an organization's public site: public and published."""
    return bool(document.is_public) and document.is_published


def project_public_organization(organization: Organization) -> dict[str, Any]:
    return {
        "name": organization.name,
        "subdomain": organization.subdomain,
        "description": organization.description,
        "website": organization.website,
        "logo": organization.logo,
    }


def project_public_document(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "title": document.title,
        "description": document.description,
        "slug": document.slug,
        "content": document.content,
        "views": document.views,
        "published_at": document.published_at,
        "updated_at": document.updated_at,
    }


def project_public_content(organization: Organization, documents: Iterable[Document]) -> dict[str, Any]:
    """
    Reduce an organization and its documents to the public shape.

    The document filter is applied even though the organization is public:
    an organization can be public while individual documents stay private.
    """
    return {
        "organization": project_public_organization(organization),
        "documents": [project_public_document(doc) for doc in documents if is_publicly_listed(doc)],
    }


async def get_public_documents(subdomain: str, db: AsyncSession) -> dict[str, Any]:
    """
    Public content for an organization subdomain.

    Raises:
        OrganizationNotFoundError: organization absent, inactive or not public.
    """
    organization = await get_organization_by_subdomain(subdomain, db)
    if organization is None or not organization.is_public:
        logger.debug("Public content requested for unknown or private subdomain %s", subdomain)
        raise OrganizationNotFoundError(subdomain.lower())

    result = await db.execute(
        select(Document)
        .where(Document.organization_id == organization.id)
        .order_by(Document.updated_at.desc(), Document.id.desc())
    )
    return project_public_content(organization, result.scalars().all())
