"""Offset pagination helpers shared by list endpoints."""

from fastapi import Query
from pydantic import BaseModel


class PageParams(BaseModel):
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
) -> PageParams:
    """FastAPI dependency reading ``page``/``limit`` query parameters."""
    return PageParams(page=page, limit=limit)
