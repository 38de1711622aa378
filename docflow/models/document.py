import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from docflow.database import Base
from docflow.models.base import enum_column_type, utcnow


class DocumentStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(String(500), nullable=True)
    content = Column(Text, nullable=False)
    status = Column(enum_column_type(DocumentStatus, "document_status"), default=DocumentStatus.DRAFT, nullable=False)
    slug = Column(String(255), nullable=True, index=True)  # derived from title, not unique
    is_public = Column(Boolean, default=False, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True)

    author = relationship("User", back_populates="documents", lazy="selectin")
    organization = relationship("Organization", back_populates="documents")

    __table_args__ = (
        Index("idx_document_status", "status"),
        Index("idx_document_org_public", "organization_id", "is_public", "status"),
    )

    @property
    def is_published(self) -> bool:
        return self.status == DocumentStatus.PUBLISHED
