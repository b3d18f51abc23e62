"""Document stores and the structured query they accept."""

from blog_dashboard.store.base import DocumentStore
from blog_dashboard.store.demo_data import demo_documents
from blog_dashboard.store.memory_store import InMemoryDocumentStore
from blog_dashboard.store.query import Condition, DocumentQuery, Ordering, Projection
from blog_dashboard.store.sanity_store import SanityDocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "SanityDocumentStore",
    "DocumentQuery",
    "Condition",
    "Ordering",
    "Projection",
    "demo_documents",
]
