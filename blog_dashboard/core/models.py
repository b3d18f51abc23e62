"""Core data models for the blog dashboard."""

import os
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blog_dashboard.core.exceptions import CMSError

T = TypeVar("T")

DEMO_PROJECT_ID = "demo-project"


class PostStatus(str, Enum):
    """Publication state of a CMS post."""

    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"


class PlannedStatus(str, Enum):
    """Progress of a planned post."""

    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Priority(str, Enum):
    """Priority of a planned post."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _flatten_slug(value: Any) -> Any:
    # The CMS stores slugs as {"_type": "slug", "current": "..."}
    if isinstance(value, dict):
        return value.get("current")
    return value


class Author(BaseModel):
    """Post author."""

    name: str
    email: str | None = None


class SEO(BaseModel):
    """Search engine metadata attached to a post."""

    model_config = ConfigDict(populate_by_name=True)

    meta_title: str | None = Field(None, alias="metaTitle")
    meta_description: str | None = Field(None, alias="metaDescription")


class BlogPost(BaseModel):
    """A post document owned by the CMS.

    Field aliases follow the CMS document shape (``_id``, ``_createdAt``,
    ``publishedAt`` ...) so raw query results validate directly; Python
    names are accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id")
    created_at: datetime = Field(..., alias="_createdAt")
    updated_at: datetime = Field(..., alias="_updatedAt")
    title: str
    slug: str
    excerpt: str | None = None
    content: list[dict[str, Any]] | None = None
    published_at: datetime | None = Field(None, alias="publishedAt")
    scheduled_date: datetime | None = Field(None, alias="scheduledDate")
    status: PostStatus = PostStatus.DRAFT
    tags: list[str] | None = None
    category: str | None = None
    author: Author | None = None
    featured_image: dict[str, Any] | None = Field(None, alias="featuredImage")
    seo: SEO | None = None

    normalize_slug = field_validator("slug", mode="before")(_flatten_slug)


class PostMetadata(BaseModel):
    """Lightweight projection of a post used for fast list rendering."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id")
    title: str
    slug: str
    published_at: datetime | None = Field(None, alias="publishedAt")
    status: PostStatus = PostStatus.DRAFT
    tags: list[str] | None = None

    normalize_slug = field_validator("slug", mode="before")(_flatten_slug)


class PostInput(BaseModel):
    """Partial post used for create and patch operations.

    Only fields that were explicitly supplied end up in the document sent
    to the store.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: str | None = None
    slug: str | None = None
    excerpt: str | None = None
    content: list[dict[str, Any]] | None = None
    published_at: datetime | None = Field(None, alias="publishedAt")
    scheduled_date: datetime | None = Field(None, alias="scheduledDate")
    status: PostStatus | None = None
    tags: list[str] | None = None
    category: str | None = None
    author: Author | None = None
    featured_image: dict[str, Any] | None = Field(None, alias="featuredImage")
    seo: SEO | None = None

    normalize_slug = field_validator("slug", mode="before")(_flatten_slug)

    def to_document(self) -> dict[str, Any]:
        """Serialize the supplied fields using CMS field names."""
        doc = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        if doc.get("slug") is not None:
            doc["slug"] = {"_type": "slug", "current": doc["slug"]}
        if isinstance(doc.get("seo"), dict):
            doc["seo"] = {k: v for k, v in doc["seo"].items() if v is not None}
        return doc


class PaginatedPosts(BaseModel):
    """One page of posts plus the total count."""

    posts: list[BlogPost]
    total: int
    has_more: bool
    page: int = 1
    limit: int = 10


class PlannedPost(BaseModel):
    """A planning-only post kept in local storage."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str | None = None
    planned_date: date = Field(..., alias="plannedDate")
    status: PlannedStatus = PlannedStatus.PLANNED
    priority: Priority = Priority.MEDIUM
    tags: list[str] | None = None
    estimated_read_time: int | None = Field(None, alias="estimatedReadTime")


class CalendarEvent(BaseModel):
    """Single entry shown on the content calendar."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    event_date: date = Field(..., alias="date")
    type: str
    post: BlogPost | None = None
    planned_post: PlannedPost | None = None


@dataclass
class QueryResult(Generic[T]):
    """Outcome of a CMS operation.

    ``value`` always holds something usable (an empty list, ``None`` or
    ``False`` when the operation failed), and ``error`` tells a failed call
    apart from a legitimately empty one.
    """

    value: T
    error: Optional[CMSError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the captured error if there was one."""
        if self.error is not None:
            raise self.error
        return self.value


class CMSConfig(BaseModel):
    """Configuration for the CMS access layer."""

    project_id: str | None = None
    dataset: str = "production"
    api_version: str = "2024-03-15"
    token: str | None = None
    use_cdn: bool = False
    timeout: float = 30.0
    max_retries: int = 3

    # Cache TTL classes, in minutes
    ttl_posts: float = 5
    ttl_post_detail: float = 10
    ttl_metadata: float = 15

    @property
    def is_demo_mode(self) -> bool:
        return not self.project_id or self.project_id == DEMO_PROJECT_ID

    @classmethod
    def from_env(cls, **overrides: Any) -> "CMSConfig":
        """Build configuration from SANITY_* environment variables.

        Args:
            **overrides: Explicit values taking precedence over the environment

        Returns:
            CMS configuration
        """
        values: dict[str, Any] = {
            "project_id": os.environ.get("SANITY_PROJECT_ID")
            or os.environ.get("NEXT_PUBLIC_SANITY_PROJECT_ID"),
            "dataset": os.environ.get("SANITY_DATASET")
            or os.environ.get("NEXT_PUBLIC_SANITY_DATASET")
            or "production",
            "api_version": os.environ.get("SANITY_API_VERSION", "2024-03-15"),
            "token": os.environ.get("SANITY_TOKEN"),
        }
        values.update(overrides)
        return cls(**values)
