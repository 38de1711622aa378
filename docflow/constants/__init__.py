from .auth import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from .roles import MemberRole, UserRole
from .subdomains import ORGANIZATION_RESERVED_SUBDOMAINS, ROUTING_RESERVED_SUBDOMAINS

__all__ = [
    "ACCESS_TOKEN_EXPIRE_MINUTES",
    "ALGORITHM",
    "SECRET_KEY",
    "MemberRole",
    "UserRole",
    "ORGANIZATION_RESERVED_SUBDOMAINS",
    "ROUTING_RESERVED_SUBDOMAINS",
]
