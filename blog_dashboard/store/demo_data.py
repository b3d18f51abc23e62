"""Built-in dataset served when no Sanity project is configured."""

import copy
from typing import Any

DEMO_IMAGE_ASSETS: list[dict[str, Any]] = [
    {
        "_id": "demo-image-1",
        "_type": "sanity.imageAsset",
        "url": "https://images.unsplash.com/photo-1555066931-4365d14bab8c?w=800&h=400&fit=crop&auto=format",
    },
    {
        "_id": "demo-image-2",
        "_type": "sanity.imageAsset",
        "url": "https://images.unsplash.com/photo-1516116216624-53e697fedbea?w=800&h=400&fit=crop&auto=format",
    },
    {
        "_id": "demo-image-3",
        "_type": "sanity.imageAsset",
        "url": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=800&h=400&fit=crop&auto=format",
    },
]

DEMO_POSTS: list[dict[str, Any]] = [
    {
        "_id": "demo-post-1",
        "_type": "post",
        "_createdAt": "2024-01-10T09:00:00Z",
        "_updatedAt": "2024-01-15T10:00:00Z",
        "title": "Getting Started with Headless CMS",
        "slug": {"_type": "slug", "current": "getting-started-with-headless-cms"},
        "excerpt": "Why separating content from presentation pays off for small blogs.",
        "content": [
            {
                "_type": "block",
                "style": "normal",
                "children": [{"_type": "span", "text": "Headless CMS platforms store content as data."}],
            }
        ],
        "publishedAt": "2024-01-15T10:00:00Z",
        "status": "published",
        "tags": ["cms", "architecture"],
        "category": "Tutorials",
        "author": {"name": "Demo Author", "email": "author@example.com"},
        "featuredImage": {"asset": {"_ref": "demo-image-1"}, "alt": "Code on a laptop screen"},
        "seo": {"metaTitle": "Getting Started with Headless CMS"},
    },
    {
        "_id": "demo-post-2",
        "_type": "post",
        "_createdAt": "2024-02-01T08:30:00Z",
        "_updatedAt": "2024-02-03T12:00:00Z",
        "title": "Planning a Content Calendar",
        "slug": {"_type": "slug", "current": "planning-a-content-calendar"},
        "excerpt": "A lightweight process for keeping a steady publishing rhythm.",
        "publishedAt": "2024-02-03T12:00:00Z",
        "status": "published",
        "tags": ["planning", "workflow"],
        "category": "Guides",
        "author": {"name": "Demo Author"},
        "featuredImage": {"asset": {"_ref": "demo-image-2"}, "alt": "Notebook and calendar"},
    },
    {
        "_id": "demo-post-3",
        "_type": "post",
        "_createdAt": "2024-02-20T14:00:00Z",
        "_updatedAt": "2024-02-22T09:15:00Z",
        "title": "Reviewing Static Site Generators",
        "slug": {"_type": "slug", "current": "reviewing-static-site-generators"},
        "excerpt": "Build times, plugin ecosystems and content previews compared.",
        "publishedAt": "2024-02-22T09:15:00Z",
        "status": "published",
        "tags": ["tooling", "review"],
        "category": "Reviews",
        "author": {"name": "Demo Author"},
        "featuredImage": {"asset": {"_ref": "demo-image-3"}, "alt": "Developer workspace"},
    },
    {
        "_id": "demo-post-4",
        "_type": "post",
        "_createdAt": "2024-03-05T11:00:00Z",
        "_updatedAt": "2024-03-06T16:45:00Z",
        "title": "Writing Better Excerpts",
        "slug": {"_type": "slug", "current": "writing-better-excerpts"},
        "excerpt": "Short summaries that make readers click.",
        "scheduledDate": "2024-03-20T08:00:00Z",
        "status": "scheduled",
        "tags": ["writing"],
        "category": "Guides",
        "author": {"name": "Demo Author"},
    },
    {
        "_id": "demo-post-5",
        "_type": "post",
        "_createdAt": "2024-03-12T17:20:00Z",
        "_updatedAt": "2024-03-12T17:20:00Z",
        "title": "Draft: Measuring Engagement",
        "slug": {"_type": "slug", "current": "measuring-engagement"},
        "status": "draft",
        "tags": ["analytics"],
        "category": "Opinion",
    },
]


def demo_documents() -> list[dict[str, Any]]:
    """Return a fresh copy of the demo posts and the image assets they reference."""
    return copy.deepcopy(DEMO_POSTS + DEMO_IMAGE_ASSETS)
