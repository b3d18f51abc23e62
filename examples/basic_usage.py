"""Basic usage examples for blog-dashboard."""

import asyncio
import logging
from datetime import date

from blog_dashboard import CMSConfig, MemoryStorage, PlanningStore, PostsAPI
from blog_dashboard.planning.calendar_view import events_by_day, load_month_events
from blog_dashboard.reports import summarize_posts


async def example_reads(api: PostsAPI) -> None:
    """Example: Listing, detail and paginated reads."""
    print("\n=== Reads ===\n")

    result = await api.fetch_all_posts()
    if not result.ok:
        print(f"Read failed: {result.error}")
        return

    for post in result.value:
        published = post.published_at.date() if post.published_at else "unpublished"
        print(f"{published}  {post.status.value:<10} {post.title}")

    detail = await api.fetch_post_by_slug(result.value[0].slug)
    print(f"\nFirst post has {len(detail.value.content or [])} content blocks")

    page = (await api.fetch_posts_paginated(page=1, limit=2)).value
    print(f"Page {page.page}: {[p.slug for p in page.posts]} of {page.total} (more: {page.has_more})")


async def example_cache_stats(api: PostsAPI) -> None:
    """Example: Repeated and concurrent reads are served once."""
    print("\n=== Cache Stats ===\n")

    await asyncio.gather(*(api.fetch_posts_metadata() for _ in range(3)))
    await api.fetch_posts_metadata()

    for name, value in api.executor.get_cache_stats().items():
        print(f"{name}: {value}")


async def example_planning(api: PostsAPI) -> None:
    """Example: Planned posts alongside CMS posts on the calendar."""
    print("\n=== Planning ===\n")

    planning = PlanningStore(MemoryStorage())
    planning.add_planned_post(
        {"title": "Content calendar retrospective", "plannedDate": date(2024, 2, 28), "priority": "high"}
    )

    result = await load_month_events(api, planning, 2024, 2)
    for day, events in sorted(events_by_day(result.value).items()):
        print(day, ", ".join(f"[{e.type}] {e.title}" for e in events))

    summary = summarize_posts((await api.fetch_all_posts()).value)
    print(f"\nPosts by status: {summary.by_status}")
    print(f"Top category: {summary.top_category}")


async def main() -> None:
    """Run all examples against the built-in demo dataset."""
    logging.basicConfig(level=logging.INFO)

    async with PostsAPI(CMSConfig(project_id="demo-project")) as api:
        await example_reads(api)
        await example_cache_stats(api)
        await example_planning(api)


if __name__ == "__main__":
    asyncio.run(main())
