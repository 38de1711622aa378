from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.constants import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from docflow.constants.roles import UserRole
from docflow.database import get_db
from docflow.exceptions import AuthorizationError, InvalidTokenError
from docflow.models.user import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token schemes; the optional one lets anonymous callers through
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT for ``user`` carrying its id, email, global role and direct organization."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": role,
        "organization_id": user.organization_id,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id stored in the token's ``sub`` claim."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Token expired")
        raise InvalidTokenError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        raise InvalidTokenError("Invalid token")

    subject = payload.get("sub")
    if subject is None:
        logger.warning("Token is missing 'sub' claim")
        raise InvalidTokenError("Token does not contain 'sub' field.")
    try:
        return int(subject)
    except ValueError:
        raise InvalidTokenError("Invalid token subject")


async def _load_principal(token: str, db: AsyncSession) -> User:
    # Deferred import avoids a cycle with the service layer
    from docflow.services.user_service import get_user_by_id

    user_id = decode_access_token(token)
    user = await get_user_by_id(user_id, db)
    if user is None:
        logger.warning(f"Token subject {user_id} is not an active user")
        raise InvalidTokenError()
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the authenticated principal or fail with 401."""
    return await _load_principal(token, db)


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Resolve the principal when a bearer token is present; ``None`` for anonymous requests."""
    if not token:
        return None
    return await _load_principal(token, db)


def has_global_role(user: Optional[User], *roles: UserRole) -> bool:
    """Check the user's global role. Never consults organization memberships."""
    return user is not None and user.role in roles


def require_role(required_roles: list[UserRole]) -> Callable[..., User]:
    """Dependency factory guarding a route by global user role."""

    async def role_validator(current_user: User = Depends(get_current_user)) -> User:
        if not has_global_role(current_user, *required_roles):
            logger.warning(
                f"Role '{current_user.role.value}' denied; required one of {[r.value for r in required_roles]}"
            )
            raise AuthorizationError(
                f"Role '{current_user.role.value}' does not have access to this resource.",
                required_roles=[r.value for r in required_roles],
            )
        return current_user

    return role_validator
