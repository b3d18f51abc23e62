"""Base interface for document stores."""

from abc import ABC, abstractmethod
from typing import Any

from blog_dashboard.store.query import DocumentQuery


class DocumentStore(ABC):
    """Abstract base class for the remote document store behind the dashboard.

    The access layer only relies on four primitives: run a query, create a
    document, patch fields of a document, and delete a document. Identity is
    assigned by the store on create.

    Example:
        >>> async with SanityDocumentStore(config) as store:
        ...     posts = await store.fetch(DocumentQuery.of_type("post"))
    """

    @abstractmethod
    async def fetch(self, query: DocumentQuery) -> Any:
        """Run a query.

        Args:
            query: Structured query

        Returns:
            A list of documents, a single document (or None) for
            ``first_only()`` queries, or an integer for ``counted()`` queries

        Raises:
            CMSError: If the store cannot answer the query
        """
        pass

    @abstractmethod
    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Create a document and return it as stored (with its ``_id``)."""
        pass

    @abstractmethod
    async def patch(self, document_id: str, set_fields: dict[str, Any]) -> dict[str, Any]:
        """Set the given fields on a document, leaving the others untouched.

        Returns:
            The updated document

        Raises:
            NotFoundError: If no document has ``document_id``
        """
        pass

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        """Delete a document. Deletion is permanent."""
        pass

    async def close(self) -> None:
        """Release connections held by the store."""
        pass

    async def __aenter__(self) -> "DocumentStore":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
