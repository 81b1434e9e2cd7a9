"""
Blog API Backend — Shared Schemas
==================================

What:  Page wrapper, statistics and health payloads used across routes.
"""

from typing import Any, Generic, List, Type, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from blogapi.exceptions import ConversionError
from blogapi.repository import Page

ItemT = TypeVar("ItemT")
SchemaT = TypeVar("SchemaT", bound=BaseModel)


def strip_required(value: str, field_name: str) -> str:
    """Trim a required text field; whitespace-only input counts as missing."""
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must not be blank")
    return stripped


def to_schema(schema: Type[SchemaT], row: Any, resource: str, **extra: Any) -> SchemaT:
    """
    Map an ORM row to its response schema.

    `extra` supplies fields the row does not carry (e.g. author_name).

    Raises:
        ConversionError: the row does not satisfy the schema
    """
    try:
        if not extra:
            return schema.model_validate(row, from_attributes=True)
        fields = {
            name: getattr(row, name)
            for name in schema.model_fields
            if name not in extra and hasattr(row, name)
        }
        return schema.model_validate({**fields, **extra})
    except PydanticValidationError as e:
        raise ConversionError(resource=resource, context={"errors": str(e)}) from e


class PageData(BaseModel, Generic[ItemT]):
    """
    What:  One page of a listing, as returned inside the envelope's `data`.

    Pagination strategy:
        Offset-based with 1-indexed pages. total_pages is
        ceil(total_items / size), so a client can render "page 2 of 7"
        without a second request.
    """
    items: List[ItemT] = Field(description="Rows on this page (at most `size`)")
    total_items: int = Field(description="Rows matching the query across all pages")
    total_pages: int = Field(description="ceil(total_items / size)")
    page: int = Field(description="1-indexed page number")
    size: int = Field(description="Requested page size")

    @classmethod
    def from_page(cls, page: Page) -> "PageData":
        return cls(
            items=list(page.items),
            total_items=page.total_items,
            total_pages=page.total_pages,
            page=page.page,
            size=page.size,
        )


class Statistics(BaseModel):
    total_posts: int
    total_users: int
    total_comments: int


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
