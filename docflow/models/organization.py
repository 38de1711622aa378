"""Organization (tenant) and organization membership models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship

from docflow.constants.roles import DEFAULT_MEMBER_ROLE, MemberRole
from docflow.database import Base
from docflow.models.base import enum_column_type, utcnow


class Organization(Base):
    """Tenant addressed externally by its subdomain."""

    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    subdomain = Column(String(63), nullable=False, unique=True, index=True)  # always stored lowercase
    custom_domain = Column(String(253), nullable=True, unique=True)
    description = Column(Text, nullable=True)
    website = Column(String(500), nullable=True)
    logo = Column(String(500), nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    users = relationship("User", back_populates="organization", foreign_keys="User.organization_id")
    documents = relationship("Document", back_populates="organization")
    members = relationship("OrganizationMember", back_populates="organization")


class OrganizationMember(Base):
    """Membership of a user in an organization, with an organization-scoped role."""

    __tablename__ = "organization_members"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(enum_column_type(MemberRole, "member_role"), default=DEFAULT_MEMBER_ROLE, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="memberships", lazy="selectin")
    organization = relationship("Organization", back_populates="members")

    __table_args__ = (
        # At most one active membership per (user, organization)
        Index(
            "uq_organization_members_active",
            "user_id",
            "organization_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )
