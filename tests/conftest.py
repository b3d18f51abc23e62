"""Pytest configuration and fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from blog_dashboard.core import CachedQueryExecutor, CMSConfig, TTLCache
from blog_dashboard.planning import MemoryStorage, PlanningStore
from blog_dashboard.posts import PostsAPI
from blog_dashboard.store import InMemoryDocumentStore


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0, minutes: float = 0) -> None:
        self.now += seconds + minutes * 60


def make_post_documents(count: int) -> list[dict]:
    """Build ``count`` post documents published one day apart (post-1 oldest)."""
    base = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
    docs = []
    for i in range(1, count + 1):
        published = base + timedelta(days=i - 1)
        docs.append(
            {
                "_id": f"post-{i}",
                "_type": "post",
                "_createdAt": published.isoformat(),
                "_updatedAt": published.isoformat(),
                "title": f"Post {i}",
                "slug": {"_type": "slug", "current": f"post-{i}"},
                "excerpt": f"Excerpt {i}",
                "content": [{"_type": "block", "children": [{"_type": "span", "text": f"Body {i}"}]}],
                "publishedAt": published.isoformat(),
                "status": "published",
                "tags": ["python"] if i % 2 else ["python", "cms"],
                "category": "Tutorials" if i % 3 else "Guides",
            }
        )
    return docs


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def executor(clock):
    return CachedQueryExecutor(cache=TTLCache(timer=clock))


@pytest.fixture
def post_documents():
    return make_post_documents(25)


@pytest.fixture
def store(post_documents):
    return InMemoryDocumentStore(post_documents)


@pytest.fixture
def config():
    return CMSConfig(project_id="test-project", dataset="test")


@pytest.fixture
def api(config, store, executor):
    """PostsAPI over an in-memory store with a controllable cache clock."""
    fixed_now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
    return PostsAPI(config=config, store=store, executor=executor, clock=lambda: fixed_now)


@pytest.fixture
def demo_api(executor):
    return PostsAPI(config=CMSConfig(project_id="demo-project"), executor=executor)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def planning(storage):
    return PlanningStore(storage)
