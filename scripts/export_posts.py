#!/usr/bin/env python3
"""Export every CMS post as a CSV or JSON report.

Reads the Sanity connection from SANITY_* environment variables and falls
back to the demo dataset when no project is configured.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from blog_dashboard import CMSConfig, PostsAPI
from blog_dashboard.reports import export_report


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--format", choices=["csv", "json"], default="csv", dest="fmt")
    parser.add_argument("--output", type=Path, help="Write to this file instead of stdout")
    parser.add_argument("--dataset", help="Override the configured dataset")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


async def _export(args: argparse.Namespace) -> int:
    overrides = {"dataset": args.dataset} if args.dataset else {}

    async with PostsAPI(CMSConfig.from_env(**overrides)) as api:
        result = await api.fetch_all_posts()

    if not result.ok:
        print(f"Could not fetch posts: {result.error}", file=sys.stderr)
        return 1

    report = export_report(result.value, args.fmt)
    if args.output is None:
        sys.stdout.write(report)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(report, encoding="utf-8")
        print(f"Wrote {len(result.value)} posts to {args.output}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_export(args))


if __name__ == "__main__":
    sys.exit(main())
