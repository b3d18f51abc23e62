"""Reporting and export."""

from blog_dashboard.reports.export import (
    CSV_COLUMNS,
    PostsSummary,
    export_posts_csv,
    export_posts_json,
    export_report,
    summarize_posts,
)

__all__ = [
    "CSV_COLUMNS",
    "PostsSummary",
    "summarize_posts",
    "export_posts_csv",
    "export_posts_json",
    "export_report",
]
