from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from docflow.models.document import DocumentStatus
from docflow.schemas.user import AuthorSummary


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, title="Document Title")
    description: Optional[str] = Field(None, max_length=500, title="Description")
    content: str = Field(..., title="Markdown Content")
    status: DocumentStatus = Field(DocumentStatus.DRAFT, title="Document Status")
    is_public: bool = Field(False, title="Public", description="Visible to anonymous readers once published")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Getting Started",
                "description": "A comprehensive guide to get started with our platform",
                "content": "# Getting Started\n\nWelcome to our platform...",
                "status": "draft",
                "is_public": False,
            }
        }
    )


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = None
    status: Optional[DocumentStatus] = None
    is_public: Optional[bool] = None


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    title: str
    description: Optional[str] = None
    content: str
    status: DocumentStatus
    slug: Optional[str] = None
    is_public: bool
    views: int
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    organization_id: Optional[int] = None
    author: AuthorSummary


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]
    total: int
    page: int
    limit: int
