"""
Document Service

Document CRUD plus the visibility rules that decide who may read and edit a
document. The rules read the user's *global* role and *direct* organization
reference; organization memberships only come into play for the
organization-scoped operations (creating and listing documents inside an
organization).
"""

import logging
from typing import Any, Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.constants.roles import READ_ORGANIZATION, WRITE_DOCUMENTS, UserRole
from docflow.exceptions import AuthorizationError, DocumentNotFoundError
from docflow.models.base import utcnow
from docflow.models.document import Document, DocumentStatus
from docflow.models.user import User
from docflow.schemas.document import DocumentCreate
from docflow.services.membership_service import check_permission
from docflow.services.organization_service import get_organization
from docflow.utils.slugify import generate_slug

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"title", "description", "content", "status", "is_public"}

# An explicit null leaves these unchanged; only the description can be cleared
REQUIRED_FIELDS = {"title", "content", "status", "is_public"}


# ── Visibility rules ───────────────────────────────────────────────────────────


def _shares_direct_organization(document: Document, user: User) -> bool:
    return document.organization_id is not None and document.organization_id == user.organization_id


def can_access(document: Document, user: Optional[User]) -> bool:
    """
    Decide whether ``user`` (None for anonymous) may read ``document``.

    First matching rule wins:
      1. public and published documents are readable by anyone
      2. anonymous readers get nothing else
      3. global admins read everything
      4. authors read their own documents
      5. users whose direct organization is the document's organization
    """
    if document.is_public and document.is_published:
        return True
    if user is None:
        return False
    if user.role == UserRole.ADMIN:
        return True
    if document.author_id == user.id:
        return True
    if _shares_direct_organization(document, user):
        return True
    return False


def can_edit(document: Document, user: User) -> bool:
    """
    Decide whether ``user`` may modify or delete ``document``.

    Global admins and the author always may; global editors may when their
    direct organization is the document's organization.
    """
    if user.role == UserRole.ADMIN:
        return True
    if document.author_id == user.id:
        return True
    if user.role == UserRole.EDITOR and _shares_direct_organization(document, user):
        return True
    return False


def apply_update(document: Document, patch: dict[str, Any]) -> Document:
    """
    Copy ``patch`` onto ``document`` in memory.

    A new title regenerates the slug. Moving into ``published`` from any
    other status stamps ``published_at`` with the current time; leaving
    ``published`` never clears it. A null for a required field is ignored.
    """
    previous_status = document.status

    for field, value in patch.items():
        if field not in EDITABLE_FIELDS:
            continue
        if value is None and field in REQUIRED_FIELDS:
            continue
        if field == "status":
            value = DocumentStatus(value)
        setattr(document, field, value)

    if patch.get("title"):
        document.slug = generate_slug(patch["title"])

    if document.status == DocumentStatus.PUBLISHED and previous_status != DocumentStatus.PUBLISHED:
        document.published_at = utcnow()

    return document


async def record_view(document: Document, db: AsyncSession) -> Document:
    """
    Count one read of a published document.

    The increment runs as a single UPDATE so concurrent readers never lose
    counts. ``updated_at`` is left untouched.
    """
    if not document.is_published:
        return document

    await db.execute(
        update(Document)
        .where(Document.id == document.id)
        .values(views=Document.views + 1, updated_at=Document.updated_at)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(document, attribute_names=["views"])
    return document


# ── Queries ────────────────────────────────────────────────────────────────────


def _visible_to(user: Optional[User]):
    """SQL filter mirroring the list visibility: admins see all, users their own or public ones."""
    public_published = and_(Document.is_public.is_(True), Document.status == DocumentStatus.PUBLISHED)
    if user is None:
        return public_published
    if user.role == UserRole.ADMIN:
        return None
    return or_(Document.author_id == user.id, public_published)


async def _get_document(document_id: int, db: AsyncSession) -> Document:
    result = await db.execute(select(Document).where(Document.id == document_id))
    document = result.scalars().first()
    if document is None:
        raise DocumentNotFoundError(document_id)
    return document


async def list_documents(
    db: AsyncSession,
    user: Optional[User] = None,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Document], int]:
    """Page of documents the caller may list, most recently updated first, with total count."""
    query = select(Document)
    count_query = select(func.count(Document.id))
    condition = _visible_to(user)
    if condition is not None:
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = await db.execute(count_query)
    result = await db.execute(query.order_by(Document.updated_at.desc(), Document.id.desc()).offset(skip).limit(limit))
    return list(result.scalars().all()), total.scalar_one()


async def get_document(document_id: int, user: Optional[User], db: AsyncSession) -> Document:
    """Read a document, enforcing access and counting the view."""
    document = await _get_document(document_id, db)
    if not can_access(document, user):
        logger.warning("Access denied: document=%d user=%s", document_id, user.id if user else None)
        raise AuthorizationError("Access denied to this document")
    return await record_view(document, db)


async def get_document_by_slug(slug: str, user: Optional[User], db: AsyncSession) -> Document:
    """
    Read a document by slug.

    Slugs are not unique; the oldest document carrying the slug is used.
    """
    result = await db.execute(select(Document).where(Document.slug == slug).order_by(Document.id).limit(1))
    document = result.scalars().first()
    if document is None:
        raise DocumentNotFoundError(slug)
    if not can_access(document, user):
        logger.warning("Access denied: document=%d user=%s", document.id, user.id if user else None)
        raise AuthorizationError("Access denied to this document")
    return await record_view(document, db)


async def get_user_documents(
    user_id: int,
    db: AsyncSession,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Document], int]:
    """Documents authored by ``user_id``, most recently updated first."""
    total = await db.execute(select(func.count(Document.id)).where(Document.author_id == user_id))
    result = await db.execute(
        select(Document)
        .where(Document.author_id == user_id)
        .order_by(Document.updated_at.desc(), Document.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total.scalar_one()


async def get_organization_documents(organization_id: int, user: User, db: AsyncSession) -> list[Document]:
    """All documents of an organization. Any active member may list them."""
    await get_organization(organization_id, db)
    await check_permission(organization_id, user.id, READ_ORGANIZATION, db)
    result = await db.execute(
        select(Document)
        .where(Document.organization_id == organization_id)
        .order_by(Document.updated_at.desc(), Document.id.desc())
    )
    return list(result.scalars().all())


# ── Mutations ──────────────────────────────────────────────────────────────────


async def _insert_document(
    data: DocumentCreate,
    author: User,
    organization_id: Optional[int],
    db: AsyncSession,
) -> Document:
    document = Document(
        title=data.title,
        description=data.description,
        content=data.content,
        status=data.status,
        is_public=data.is_public,
        slug=generate_slug(data.title),
        views=0,
        author_id=author.id,
        organization_id=organization_id,
    )
    if data.status == DocumentStatus.PUBLISHED:
        document.published_at = utcnow()

    db.add(document)
    await db.commit()
    await db.refresh(document)
    logger.info(
        "Document created: id=%d slug=%s author=%d org=%s",
        document.id,
        document.slug,
        author.id,
        organization_id,
    )
    return document


async def create_document(data: DocumentCreate, author: User, db: AsyncSession) -> Document:
    """Create a document in the author's direct organization (if any)."""
    return await _insert_document(data, author, author.organization_id, db)


async def create_document_for_organization(
    data: DocumentCreate,
    organization_id: int,
    author: User,
    db: AsyncSession,
) -> Document:
    """Create a document inside an organization. Caller must be owner, admin or editor there."""
    organization = await get_organization(organization_id, db)
    await check_permission(organization.id, author.id, WRITE_DOCUMENTS, db)
    return await _insert_document(data, author, organization.id, db)


async def update_document(
    document_id: int,
    patch: dict[str, Any],
    user: User,
    db: AsyncSession,
) -> Document:
    document = await _get_document(document_id, db)
    if not can_edit(document, user):
        logger.warning("Edit denied: document=%d user=%d", document_id, user.id)
        raise AuthorizationError("Access denied to edit this document")

    apply_update(document, patch)
    await db.commit()
    await db.refresh(document)
    logger.info("Document updated: id=%d fields=%s by=%d", document.id, sorted(patch), user.id)
    return document


async def delete_document(document_id: int, user: User, db: AsyncSession) -> None:
    document = await _get_document(document_id, db)
    if not can_edit(document, user):
        logger.warning("Delete denied: document=%d user=%d", document_id, user.id)
        raise AuthorizationError("Access denied to delete this document")

    await db.delete(document)
    await db.commit()
    logger.info("Document deleted: id=%d by=%d", document_id, user.id)
