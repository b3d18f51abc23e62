"""Post summaries and CSV/JSON export."""

import csv
import io
import json
from collections import Counter
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from blog_dashboard.core.models import BlogPost

CSV_COLUMNS = ["id", "title", "slug", "status", "published_at", "category", "tags"]


class PostsSummary(BaseModel):
    """Aggregate numbers over a set of posts."""

    total_posts: int
    by_status: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    top_category: str | None = None
    top_tags: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def summarize_posts(posts: list[BlogPost], top_n: int = 5) -> PostsSummary:
    """Count posts per status and category and pick the most used tags."""
    statuses = Counter(post.status.value for post in posts)
    categories = Counter(post.category for post in posts if post.category)
    tags = Counter(tag for post in posts for tag in post.tags or [])

    return PostsSummary(
        total_posts=len(posts),
        by_status=dict(statuses),
        by_category=dict(categories),
        top_category=categories.most_common(1)[0][0] if categories else None,
        top_tags=[tag for tag, _ in tags.most_common(top_n)],
    )


def export_posts_csv(posts: list[BlogPost]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for post in posts:
        writer.writerow(
            {
                "id": post.id,
                "title": post.title,
                "slug": post.slug,
                "status": post.status.value,
                "published_at": post.published_at.isoformat() if post.published_at else "",
                "category": post.category or "",
                "tags": ";".join(post.tags or []),
            }
        )
    return buffer.getvalue()


def export_posts_json(posts: list[BlogPost], indent: int = 2) -> str:
    """Posts plus their summary as a JSON document."""
    payload = {
        "summary": summarize_posts(posts).model_dump(mode="json"),
        "posts": [post.model_dump(mode="json", exclude_none=True) for post in posts],
    }
    return json.dumps(payload, indent=indent)


def export_report(posts: list[BlogPost], fmt: Literal["csv", "json"] = "csv") -> str:
    """Export posts in the requested format.

    Raises:
        ValueError: If ``fmt`` is not "csv" or "json"
    """
    if fmt == "csv":
        return export_posts_csv(posts)
    if fmt == "json":
        return export_posts_json(posts)
    raise ValueError(f"Unsupported export format: {fmt}")
