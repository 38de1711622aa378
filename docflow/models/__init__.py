from .document import Document, DocumentStatus
from .organization import Organization, OrganizationMember
from .user import User

__all__ = [
    "Document",
    "DocumentStatus",
    "Organization",
    "OrganizationMember",
    "User",
]
