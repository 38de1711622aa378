from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from docflow.constants.roles import DEFAULT_MEMBER_ROLE, MemberRole
from docflow.constants.subdomains import SUBDOMAIN_MAX_LENGTH, SUBDOMAIN_MIN_LENGTH


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100, examples=["Acme Corp"])
    # Format and reserved names are validated by the service (409 Conflict)
    subdomain: str = Field(..., min_length=SUBDOMAIN_MIN_LENGTH, max_length=SUBDOMAIN_MAX_LENGTH, examples=["acme"])
    description: Optional[str] = Field(None, max_length=500)
    website: Optional[HttpUrl] = None
    is_public: bool = True


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    subdomain: Optional[str] = Field(None, min_length=SUBDOMAIN_MIN_LENGTH, max_length=SUBDOMAIN_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=500)
    website: Optional[HttpUrl] = None
    logo: Optional[str] = Field(None, max_length=500)
    is_public: Optional[bool] = None


class OrganizationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    subdomain: str
    custom_domain: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    is_active: bool
    is_public: bool
    created_at: datetime
    updated_at: datetime


class OrganizationWithRole(OrganizationResponse):
    """An organization together with the caller's membership role in it."""

    role: MemberRole

    @classmethod
    def from_row(cls, organization, role: MemberRole) -> "OrganizationWithRole":
        return cls(**OrganizationResponse.model_validate(organization).model_dump(), role=role)


class MemberCreate(BaseModel):
    user_id: int
    role: MemberRole = DEFAULT_MEMBER_ROLE


class MemberRoleUpdate(BaseModel):
    role: MemberRole


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    user_id: int
    organization_id: int
    role: MemberRole
    is_active: bool
    joined_at: datetime
    updated_at: datetime
    email: Optional[str] = None
    full_name: Optional[str] = None

    @classmethod
    def from_member(cls, member) -> "MemberResponse":
        return cls(
            id=member.id,
            user_id=member.user_id,
            organization_id=member.organization_id,
            role=member.role,
            is_active=member.is_active,
            joined_at=member.joined_at,
            updated_at=member.updated_at,
            email=member.user.email if member.user else None,
            full_name=member.user.full_name if member.user else None,
        )


class PublicOrganization(BaseModel):
    name: str
    subdomain: str
    description: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None


class PublicDocument(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    slug: Optional[str] = None
    content: str
    views: int
    published_at: Optional[datetime] = None
    updated_at: datetime


class PublicOrganizationContent(BaseModel):
    organization: PublicOrganization
    documents: list[PublicDocument]


class PublicDocumentContent(BaseModel):
    organization: PublicOrganization
    document: PublicDocument
