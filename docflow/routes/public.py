"""
Organization public site, served on organization subdomains.

GET /              → organization profile and public documents
GET /docs/{slug}   → one public, published document

Both routes answer 404 on the main domain; the host header is resolved by
SubdomainMiddleware before the request reaches them.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.database import get_db
from docflow.exceptions import DocumentNotFoundError, OrganizationNotFoundError
from docflow.schemas.organization import PublicDocumentContent, PublicOrganizationContent
from docflow.services import organization_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _organization_slug(request: Request) -> str:
    if not getattr(request.state, "is_subdomain", False):
        raise OrganizationNotFoundError(request.headers.get("host", ""))
    return request.state.organization_slug


@router.get("/", response_model=PublicOrganizationContent)
async def public_site(request: Request, db: AsyncSession = Depends(get_db)) -> PublicOrganizationContent:
    content = await organization_service.get_public_documents(_organization_slug(request), db)
    return PublicOrganizationContent.model_validate(content)


@router.get("/docs/{slug}", response_model=PublicDocumentContent)
async def public_document(slug: str, request: Request, db: AsyncSession = Depends(get_db)) -> PublicDocumentContent:
    content = await organization_service.get_public_documents(_organization_slug(request), db)
    for document in content["documents"]:
        if document["slug"] == slug:
            return PublicDocumentContent(organization=content["organization"], document=document)

    logger.debug("No public document %s on subdomain %s", slug, request.state.organization_slug)
    raise DocumentNotFoundError(slug)
