"""Tests for core models."""

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from blog_dashboard.core import (
    BlogPost,
    CalendarEvent,
    CMSConfig,
    PlannedPost,
    PostInput,
    PostStatus,
    QueryResult,
)
from blog_dashboard.core.exceptions import CMSError, RateLimitError


def test_blog_post_from_cms_document():
    """Test a raw CMS document validates through its aliases."""
    post = BlogPost.model_validate(
        {
            "_id": "p1",
            "_type": "post",
            "_createdAt": "2024-01-01T00:00:00Z",
            "_updatedAt": "2024-01-02T00:00:00Z",
            "title": "Hello",
            "slug": {"_type": "slug", "current": "hello"},
            "publishedAt": "2024-01-03T10:00:00Z",
            "status": "published",
            "seo": {"metaTitle": "Hello!"},
        }
    )

    assert post.id == "p1"
    assert post.slug == "hello"
    assert post.published_at == datetime(2024, 1, 3, 10, 0, tzinfo=UTC)
    assert post.status == PostStatus.PUBLISHED
    assert post.seo.meta_title == "Hello!"


def test_blog_post_defaults_to_draft():
    """Test a post without a status is a draft."""
    post = BlogPost(id="p", created_at=datetime(2024, 1, 1), updated_at=datetime(2024, 1, 1), title="t", slug="s")

    assert post.status == PostStatus.DRAFT
    assert post.tags is None


def test_blog_post_rejects_unknown_status():
    """Test an unknown status fails validation."""
    with pytest.raises(ValidationError):
        BlogPost(
            id="p",
            created_at=datetime(2024, 1, 1),
            updated_at=datetime(2024, 1, 1),
            title="t",
            slug="s",
            status="archived",
        )


def test_post_input_to_document_only_includes_supplied_fields():
    """Test unset fields are left out and the slug is wrapped."""
    doc = PostInput(title="New", slug="new", seo={"metaTitle": "New"}).to_document()

    assert doc == {"title": "New", "slug": {"_type": "slug", "current": "new"}, "seo": {"metaTitle": "New"}}


def test_post_input_uses_cms_field_names():
    """Test post input serializes to CMS field names."""
    doc = PostInput(published_at=datetime(2024, 2, 1, tzinfo=UTC), status="scheduled").to_document()

    assert set(doc) == {"publishedAt", "status"}
    assert doc["status"] == "scheduled"


def test_post_input_forbids_unknown_fields():
    """Test post input rejects unknown fields."""
    with pytest.raises(ValidationError):
        PostInput(title="x", views=10)


def test_planned_post_aliases():
    """Test planned posts accept and emit camelCase aliases."""
    planned = PlannedPost.model_validate(
        {"id": "1", "title": "Plan", "plannedDate": "2024-05-01", "estimatedReadTime": 6}
    )

    assert planned.planned_date == date(2024, 5, 1)
    assert planned.model_dump(by_alias=True, mode="json")["plannedDate"] == "2024-05-01"


def test_calendar_event_accepts_date_alias():
    """Test calendar events accept the date alias."""
    event = CalendarEvent.model_validate({"id": "e", "title": "E", "date": "2024-05-01", "type": "planned"})

    assert event.event_date == date(2024, 5, 1)


def test_query_result():
    """Test query results report success and unwrap their value."""
    ok = QueryResult([1, 2])
    failed = QueryResult([], CMSError("boom", operation="fetch_all_posts"))

    assert ok.ok and ok.unwrap() == [1, 2]
    assert not failed.ok
    with pytest.raises(CMSError, match=r"\[fetch_all_posts\] boom"):
        failed.unwrap()


def test_rate_limit_error_fields():
    """Test rate limit errors carry the 429 status and the retry delay."""
    error = RateLimitError("slow down", operation="fetch", retry_after=3)

    assert error.status_code == 429
    assert error.retry_after == 3
    assert str(error) == "[fetch] slow down"


@pytest.mark.parametrize(
    "project_id,expected",
    [(None, True), ("", True), ("demo-project", True), ("abc123", False)],
)
def test_config_demo_mode(project_id, expected):
    """Test a missing or placeholder project id means demo mode."""
    assert CMSConfig(project_id=project_id).is_demo_mode is expected


def test_config_from_env(monkeypatch):
    """Test configuration is read from SANITY_* variables."""
    monkeypatch.setenv("SANITY_PROJECT_ID", "abc123")
    monkeypatch.setenv("SANITY_DATASET", "staging")
    monkeypatch.setenv("SANITY_TOKEN", "tok")
    monkeypatch.delenv("SANITY_API_VERSION", raising=False)

    config = CMSConfig.from_env()

    assert config.project_id == "abc123"
    assert config.dataset == "staging"
    assert config.token == "tok"
    assert config.api_version == "2024-03-15"
    assert not config.is_demo_mode


def test_config_from_env_fallbacks_and_overrides(monkeypatch):
    """Test environment settings fall back in order and overrides win."""
    for name in ("SANITY_PROJECT_ID", "SANITY_DATASET", "NEXT_PUBLIC_SANITY_DATASET", "SANITY_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NEXT_PUBLIC_SANITY_PROJECT_ID", "public-id")

    config = CMSConfig.from_env(dataset="preview", ttl_posts=1)

    assert config.project_id == "public-id"
    assert config.dataset == "preview"
    assert config.ttl_posts == 1


def test_config_from_env_without_project_is_demo(monkeypatch):
    """Test an environment without a project id yields demo mode."""
    monkeypatch.delenv("SANITY_PROJECT_ID", raising=False)
    monkeypatch.delenv("NEXT_PUBLIC_SANITY_PROJECT_ID", raising=False)

    assert CMSConfig.from_env().is_demo_mode
