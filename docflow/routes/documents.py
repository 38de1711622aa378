"""
Document routes.

POST   /documents                                  → create in the author's organization
GET    /documents                                  → paginated list (anonymous allowed)
GET    /documents/my/documents                     → caller's own documents
GET    /documents/writable-organizations           → organizations the caller can write to
POST   /documents/organization/{organization_id}   → create inside an organization
GET    /documents/organization/{organization_id}   → list an organization's documents
GET    /documents/slug/{slug}                      → read by slug (counts a view)
GET    /documents/{document_id}                    → read by id (counts a view)
PUT    /documents/{document_id}                    → update
DELETE /documents/{document_id}                    → delete

Static paths are registered before ``/{document_id}``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.auth import get_current_user, get_optional_user
from docflow.database import get_db
from docflow.models.user import User
from docflow.schemas.document import DocumentCreate, DocumentListResponse, DocumentResponse, DocumentUpdate
from docflow.schemas.organization import OrganizationWithRole
from docflow.services import document_service, membership_service
from docflow.utils.pagination import PageParams, page_params

logger = logging.getLogger(__name__)

router = APIRouter()


def _page(documents, total: int, pagination: PageParams) -> DocumentListResponse:
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    payload: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    document = await document_service.create_document(payload, current_user, db)
    return DocumentResponse.model_validate(document)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    pagination: PageParams = Depends(page_params),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentListResponse:
    documents, total = await document_service.list_documents(
        db, user=current_user, skip=pagination.offset, limit=pagination.limit
    )
    return _page(documents, total, pagination)


@router.get("/my/documents", response_model=DocumentListResponse)
async def get_my_documents(
    pagination: PageParams = Depends(page_params),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentListResponse:
    documents, total = await document_service.get_user_documents(
        current_user.id, db, skip=pagination.offset, limit=pagination.limit
    )
    return _page(documents, total, pagination)


@router.get("/writable-organizations", response_model=list[OrganizationWithRole])
async def get_writable_organizations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[OrganizationWithRole]:
    rows = await membership_service.get_writable_organizations(current_user.id, db)
    return [OrganizationWithRole.from_row(organization, role) for organization, role in rows]


@router.post(
    "/organization/{organization_id}",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_document_for_organization(
    organization_id: int,
    payload: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    document = await document_service.create_document_for_organization(payload, organization_id, current_user, db)
    return DocumentResponse.model_validate(document)


@router.get("/organization/{organization_id}", response_model=list[DocumentResponse])
async def get_organization_documents(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[DocumentResponse]:
    documents = await document_service.get_organization_documents(organization_id, current_user, db)
    return [DocumentResponse.model_validate(d) for d in documents]


@router.get("/slug/{slug}", response_model=DocumentResponse)
async def get_document_by_slug(
    slug: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    document = await document_service.get_document_by_slug(slug, current_user, db)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    document = await document_service.get_document(document_id, current_user, db)
    return DocumentResponse.model_validate(document)


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: int,
    payload: DocumentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    patch = payload.model_dump(exclude_unset=True)
    document = await document_service.update_document(document_id, patch, current_user, db)
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await document_service.delete_document(document_id, current_user, db)
