"""Document store evaluating queries over an in-memory list.

Backs demo mode and tests. Semantics follow what the dashboard expects from
the CMS: range comparisons never match a missing field or a ``None`` bound,
while ``field == None`` matches documents lacking the field (as
``field == null`` does in GROQ). Missing values sort after present ones, and
nested projections follow ``{"_ref": id}`` references to other documents in
the store.
"""

import copy
import uuid
from datetime import UTC, date, datetime
from typing import Any, Iterable, Optional

from blog_dashboard.core.exceptions import NotFoundError
from blog_dashboard.store.base import DocumentStore
from blog_dashboard.store.query import Condition, DocumentQuery, Projection, ProjectionField


class InMemoryDocumentStore(DocumentStore):
    """Document store holding documents in a list."""

    def __init__(self, documents: Optional[Iterable[dict[str, Any]]] = None) -> None:
        self._documents: list[dict[str, Any]] = [copy.deepcopy(d) for d in documents or []]

    @property
    def documents(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._documents)

    async def fetch(self, query: DocumentQuery) -> Any:
        docs = [
            d
            for d in self._documents
            if (query.document_type is None or d.get("_type") == query.document_type)
            and all(_matches(d, c) for c in query.conditions)
        ]

        if query.count:
            return len(docs)

        for ordering in reversed(query.ordering):
            present = [d for d in docs if _lookup(d, ordering.field) is not None]
            missing = [d for d in docs if _lookup(d, ordering.field) is None]
            present.sort(
                key=lambda d: _sort_key(_lookup(d, ordering.field)),
                reverse=ordering.descending,
            )
            docs = present + missing

        if query.first:
            if not docs:
                return None
            return self._project(docs[0], query.projection)

        if query.limit is not None:
            start = query.offset or 0
            docs = docs[start : start + query.limit]

        return [self._project(d, query.projection) for d in docs]

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        doc = copy.deepcopy(document)
        doc.setdefault("_id", uuid.uuid4().hex)
        now = datetime.now(UTC).isoformat()
        doc.setdefault("_createdAt", now)
        doc.setdefault("_updatedAt", now)
        self._documents.append(doc)
        return copy.deepcopy(doc)

    async def patch(self, document_id: str, set_fields: dict[str, Any]) -> dict[str, Any]:
        doc = self._find(document_id)
        if doc is None:
            raise NotFoundError(f"Document not found: {document_id}", operation="patch", status_code=404)
        doc.update(copy.deepcopy(set_fields))
        return copy.deepcopy(doc)

    async def delete(self, document_id: str) -> None:
        self._documents = [d for d in self._documents if d.get("_id") != document_id]

    def _find(self, document_id: str) -> Optional[dict[str, Any]]:
        for doc in self._documents:
            if doc.get("_id") == document_id:
                return doc
        return None

    def _project(self, doc: Any, fields: Optional[tuple[ProjectionField, ...]]) -> Any:
        if fields is None or not isinstance(doc, dict):
            return copy.deepcopy(doc)

        result: dict[str, Any] = {}
        for item in fields:
            if isinstance(item, Projection):
                if item.field not in doc:
                    continue
                value = doc[item.field]
                if item.dereference:
                    value = self._dereference(value)
                if isinstance(value, list):
                    result[item.field] = [self._project(v, item.fields) for v in value]
                else:
                    result[item.field] = self._project(value, item.fields)
            elif item in doc:
                result[item] = copy.deepcopy(doc[item])
        return result

    def _dereference(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self._dereference(v) for v in value]
        if isinstance(value, dict) and "_ref" in value:
            return self._find(value["_ref"])
        return value


def _lookup(doc: dict[str, Any], path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _comparable(value: Any) -> Any:
    # ISO-8601 strings compare as instants so "2024-01-01" and
    # "2024-01-01T10:00:00Z" order correctly against each other
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return value
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return value


def _sort_key(value: Any) -> tuple[int, Any]:
    # Rank by kind first so mixed fields (ISO and free-form strings,
    # numbers, objects) never compare across types
    value = _comparable(value)
    if isinstance(value, datetime):
        return (0, value)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, repr(value))


def _matches(doc: dict[str, Any], condition: Condition) -> bool:
    actual = _lookup(doc, condition.field)
    expected = condition.value
    if isinstance(expected, (datetime, date)):
        expected = expected.isoformat()

    if condition.op == "==":
        return actual == expected
    if condition.op == "!=":
        return actual != expected
    if actual is None or expected is None:
        return False

    left, right = _comparable(actual), _comparable(expected)
    try:
        if condition.op == ">=":
            return left >= right
        if condition.op == "<=":
            return left <= right
        if condition.op == ">":
            return left > right
        return left < right
    except TypeError:
        # Mixed types (e.g. a date against a plain string) never match
        return False
