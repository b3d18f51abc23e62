"""Sanity HTTP API document store."""

import json
import logging
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from blog_dashboard.core.exceptions import (
    AuthenticationError,
    CMSError,
    DocumentStoreError,
    NotFoundError,
    RateLimitError,
    TimeoutError,
)
from blog_dashboard.core.models import CMSConfig
from blog_dashboard.store.base import DocumentStore
from blog_dashboard.store.query import DocumentQuery

logger = logging.getLogger(__name__)


class SanityDocumentStore(DocumentStore):
    """Document store talking to the Sanity query and mutation endpoints.

    Queries go to ``GET /data/query/{dataset}`` with parameters bound as
    ``$name`` query arguments; create/patch/delete go to
    ``POST /data/mutate/{dataset}``. Throttled requests (HTTP 429) are
    retried with exponential backoff; any other failure is raised
    immediately.
    """

    def __init__(
        self,
        config: CMSConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize Sanity store.

        Args:
            config: CMS configuration
            transport: Custom httpx transport (used for testing)

        Raises:
            CMSError: If no project ID is configured
        """
        if config.is_demo_mode:
            raise CMSError("Sanity project ID is required", operation="configure")

        self.config = config
        host = "apicdn" if config.use_cdn else "api"

        headers = {}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"

        self.client = httpx.AsyncClient(
            base_url=f"https://{config.project_id}.{host}.sanity.io/v{config.api_version}",
            headers=headers,
            timeout=config.timeout,
            transport=transport,
        )
        self.retry_wait = wait_exponential(multiplier=1, min=2, max=10)

    async def fetch(self, query: DocumentQuery) -> Any:
        groq, params = query.render()
        request_params = {"query": groq}
        for name, value in params.items():
            request_params[f"${name}"] = json.dumps(value)

        body = await self._request(
            "GET",
            f"/data/query/{self.config.dataset}",
            operation="fetch",
            params=request_params,
        )
        return body.get("result")

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        return await self._mutate({"create": document}, operation="create")

    async def patch(self, document_id: str, set_fields: dict[str, Any]) -> dict[str, Any]:
        return await self._mutate(
            {"patch": {"id": document_id, "set": set_fields}}, operation="patch"
        )

    async def delete(self, document_id: str) -> None:
        await self._mutate({"delete": {"id": document_id}}, operation="delete")

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def _mutate(self, mutation: dict[str, Any], operation: str) -> Any:
        body = await self._request(
            "POST",
            f"/data/mutate/{self.config.dataset}",
            operation=operation,
            params={"returnDocuments": "true", "visibility": "sync"},
            json={"mutations": [mutation]},
        )
        results = body.get("results") or []
        if operation == "delete":
            return None
        if not results or results[0].get("document") is None:
            # Patching a missing id yields no document
            raise NotFoundError(
                "Mutation returned no document", operation=operation, status_code=404
            )
        return results[0]["document"]

    async def _request(self, method: str, path: str, operation: str, **kwargs: Any) -> dict[str, Any]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, self.config.max_retries)),
            wait=self.retry_wait,
            retry=retry_if_exception_type(RateLimitError),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, path, operation, **kwargs)
        raise CMSError("Request was not attempted", operation=operation)  # pragma: no cover

    async def _send(self, method: str, path: str, operation: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TimeoutError(
                f"Request timed out after {self.config.timeout}s: {e}", operation=operation
            )
        except httpx.HTTPError as e:
            raise DocumentStoreError(f"Request failed: {e}", operation=operation)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(f"Sanity rate limit hit during {operation}")
            raise RateLimitError(
                "Rate limit exceeded",
                operation=operation,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Sanity rejected the credentials",
                operation=operation,
                status_code=response.status_code,
                response_body=response.text,
            )
        if response.status_code == 404:
            raise NotFoundError(
                f"Not found: {path}",
                operation=operation,
                status_code=404,
                response_body=response.text,
            )
        if response.status_code >= 400:
            raise DocumentStoreError(
                f"Sanity returned status {response.status_code}",
                operation=operation,
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DocumentStoreError(
                f"Invalid JSON response: {e}", operation=operation, status_code=response.status_code
            )
