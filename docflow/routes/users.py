"""
User administration routes (global admins only).

GET    /users                          → list active users
DELETE /users/{user_id}                → deactivate (soft delete)
PUT    /users/{user_id}/organization   → set the user's direct organization
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.auth import require_role
from docflow.constants.roles import UserRole
from docflow.database import get_db
from docflow.models.user import User
from docflow.schemas.user import OrganizationAssignment, UserListResponse, UserResponse
from docflow.services import user_service
from docflow.utils.pagination import PageParams, page_params

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_role([UserRole.ADMIN])


@router.get("", response_model=UserListResponse)
async def list_users(
    pagination: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserListResponse:
    users, total = await user_service.list_users(db, skip=pagination.offset, limit=pagination.limit)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    await user_service.deactivate_user(user_id, db)


@router.put("/{user_id}/organization", response_model=UserResponse)
async def assign_organization(
    user_id: int,
    payload: OrganizationAssignment,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserResponse:
    user = await user_service.assign_organization(user_id, payload.organization_id, db)
    return UserResponse.model_validate(user)
