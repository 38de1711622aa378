"""
Organization and membership routes.

POST   /organizations                                  → create (caller becomes owner)
GET    /organizations                                  → caller's organizations (all of them for global admins)
GET    /organizations/public/subdomain/{subdomain}     → public projection, no auth
GET    /organizations/{organization_id}                → read (members only)
PUT    /organizations/{organization_id}                → update (owner, admin)
DELETE /organizations/{organization_id}                → soft delete (owner)
GET    /organizations/{organization_id}/members        → list members (members only)
POST   /organizations/{organization_id}/members        → add member (owner, admin)
PUT    /organizations/{organization_id}/members/{id}   → change role (owner, admin)
DELETE /organizations/{organization_id}/members/{id}   → remove member (owner, admin)
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.auth import get_current_user, has_global_role
from docflow.constants.roles import UserRole
from docflow.database import get_db
from docflow.models.user import User
from docflow.schemas.organization import (
    MemberCreate,
    MemberResponse,
    MemberRoleUpdate,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
    PublicOrganizationContent,
)
from docflow.services import membership_service, organization_service
from docflow.utils.pagination import PageParams, page_params

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    payload: OrganizationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    organization = await organization_service.create_organization_with_owner(
        name=payload.name,
        subdomain=payload.subdomain,
        owner_id=current_user.id,
        db=db,
        description=payload.description,
        website=str(payload.website) if payload.website else None,
        is_public=payload.is_public,
    )
    return OrganizationResponse.model_validate(organization)


@router.get("", response_model=list[OrganizationResponse])
async def list_organizations(
    pagination: PageParams = Depends(page_params),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[OrganizationResponse]:
    if has_global_role(current_user, UserRole.ADMIN):
        organizations = await organization_service.list_organizations(
            db, skip=pagination.offset, limit=pagination.limit
        )
    else:
        rows = await membership_service.get_user_organizations(current_user.id, db)
        organizations = [organization for organization, _role in rows]
    return [OrganizationResponse.model_validate(o) for o in organizations]


@router.get("/public/subdomain/{subdomain}", response_model=PublicOrganizationContent)
async def get_public_content(subdomain: str, db: AsyncSession = Depends(get_db)) -> PublicOrganizationContent:
    """Public organization profile and its public, published documents."""
    content = await organization_service.get_public_documents(subdomain, db)
    return PublicOrganizationContent.model_validate(content)


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    organization = await organization_service.get_organization_for_member(organization_id, current_user.id, db)
    return OrganizationResponse.model_validate(organization)


@router.put("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: int,
    payload: OrganizationUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrganizationResponse:
    organization = await organization_service.update_organization(
        organization_id,
        payload.model_dump(mode="json", exclude_unset=True),
        current_user.id,
        db,
    )
    return OrganizationResponse.model_validate(organization)


@router.delete("/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await organization_service.delete_organization(organization_id, current_user.id, db)


# ── Members ────────────────────────────────────────────────────────────────────


@router.get("/{organization_id}/members", response_model=list[MemberResponse])
async def list_members(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[MemberResponse]:
    await organization_service.get_organization(organization_id, db)
    members = await membership_service.list_members(organization_id, current_user.id, db)
    return [MemberResponse.from_member(m) for m in members]


@router.post(
    "/{organization_id}/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    organization_id: int,
    payload: MemberCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    await organization_service.get_organization(organization_id, db)
    member = await membership_service.add_member(
        organization_id,
        payload.user_id,
        current_user.id,
        db,
        role=payload.role,
    )
    return MemberResponse.from_member(member)


@router.put("/{organization_id}/members/{member_id}", response_model=MemberResponse)
async def update_member_role(
    organization_id: int,
    member_id: int,
    payload: MemberRoleUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    member = await membership_service.update_member_role(
        organization_id, member_id, payload.role, current_user.id, db
    )
    return MemberResponse.from_member(member)


@router.delete("/{organization_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    organization_id: int,
    member_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await membership_service.remove_member(organization_id, member_id, current_user.id, db)
