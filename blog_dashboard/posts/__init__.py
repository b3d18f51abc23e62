"""CMS access layer for blog posts."""

from blog_dashboard.posts.api import PostsAPI
from blog_dashboard.posts.search import PostFilters, SortBy, filter_posts

__all__ = ["PostsAPI", "PostFilters", "SortBy", "filter_posts"]
