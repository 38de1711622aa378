import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.auth import create_access_token, get_current_user
from docflow.config import settings
from docflow.database import get_db
from docflow.middleware.rate_limit import limiter
from docflow.models.user import User
from docflow.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from docflow.services.user_service import authenticate_user, create_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(access_token=create_access_token(user), user=UserResponse.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.login_rate_limit)
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Create an account and return an access token for it."""
    user = await create_user(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
        db=db,
    )
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Exchange email and password for an access token."""
    user = await authenticate_user(payload.email, payload.password, db)
    return _auth_response(user)


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
