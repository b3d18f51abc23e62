"""Structured document queries rendered to GROQ.

A ``DocumentQuery`` describes what to fetch (type filter, field
comparisons, ordering, slicing, projection) without committing to a query
language. ``render()`` produces a GROQ string plus bound parameters for the
Sanity HTTP API; ``InMemoryDocumentStore`` evaluates the same object
directly against a list of documents.

Example:
    >>> query = (
    ...     DocumentQuery.of_type("post")
    ...     .order_by("publishedAt", descending=True)
    ...     .slice(0, 10)
    ...     .project("_id", "title", Projection("author", ("name",)))
    ... )
    >>> query.render()
    ('*[_type == $type] | order(publishedAt desc) [0...10] {_id, title, author{name}}',
     {'type': 'post'})
"""

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Any, Optional, Union

OPERATORS = ("==", "!=", ">=", "<=", ">", "<")

RANGE_OPERATORS = (">=", "<=", ">", "<")


@dataclass(frozen=True)
class Condition:
    """Comparison of a (dotted) document field against a value."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")


@dataclass(frozen=True)
class Ordering:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Projection:
    """Nested projection, optionally following a reference.

    ``Projection("asset", ("_id", "url"), dereference=True)`` renders as
    ``asset->{_id, url}``.
    """

    field: str
    fields: tuple["ProjectionField", ...]
    dereference: bool = False


ProjectionField = Union[str, Projection]


@dataclass(frozen=True)
class DocumentQuery:
    """Immutable description of a document query."""

    document_type: Optional[str] = None
    conditions: tuple[Condition, ...] = ()
    ordering: tuple[Ordering, ...] = ()
    offset: Optional[int] = None
    limit: Optional[int] = None
    first: bool = False
    count: bool = False
    projection: Optional[tuple[ProjectionField, ...]] = None

    @classmethod
    def of_type(cls, document_type: str) -> "DocumentQuery":
        return cls(document_type=document_type)

    def where(self, field_name: str, op: str, value: Any) -> "DocumentQuery":
        return replace(self, conditions=self.conditions + (Condition(field_name, op, value),))

    def order_by(self, field_name: str, descending: bool = False) -> "DocumentQuery":
        return replace(self, ordering=self.ordering + (Ordering(field_name, descending),))

    def slice(self, offset: int, limit: int) -> "DocumentQuery":
        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must be non-negative")
        return replace(self, offset=offset, limit=limit)

    def first_only(self) -> "DocumentQuery":
        return replace(self, first=True)

    def counted(self) -> "DocumentQuery":
        return replace(self, count=True)

    def project(self, *fields: ProjectionField) -> "DocumentQuery":
        return replace(self, projection=tuple(fields))

    def render(self) -> tuple[str, dict[str, Any]]:
        """Render as a GROQ query string and its parameters.

        Values are always passed as parameters, never interpolated.

        Returns:
            Tuple of (query, params) where params map names without the
            leading ``$`` to JSON-serializable values
        """
        params: dict[str, Any] = {}
        filters: list[str] = []

        if self.document_type is not None:
            params["type"] = self.document_type
            filters.append("_type == $type")

        for i, condition in enumerate(self.conditions):
            name = f"p{i}"
            params[name] = _param_value(condition.value)
            if isinstance(condition.value, datetime) and condition.op in RANGE_OPERATORS:
                # Compare as instants; stored timestamps mix "Z" and offsets
                filters.append(f"dateTime({condition.field}) {condition.op} dateTime(${name})")
            else:
                filters.append(f"{condition.field} {condition.op} ${name}")

        groq = f"*[{' && '.join(filters)}]" if filters else "*"

        if self.count:
            return f"count({groq})", params

        if self.ordering:
            terms = ", ".join(
                f"{o.field} desc" if o.descending else f"{o.field} asc" for o in self.ordering
            )
            groq += f" | order({terms})"

        if self.first:
            groq += "[0]"
        elif self.limit is not None:
            start = self.offset or 0
            groq += f" [{start}...{start + self.limit}]"

        if self.projection:
            groq += f" {_render_fields(self.projection)}"

        return groq, params


def _render_fields(fields: tuple[ProjectionField, ...]) -> str:
    parts = []
    for item in fields:
        if isinstance(item, Projection):
            arrow = "->" if item.dereference else ""
            parts.append(f"{item.field}{arrow}{_render_fields(item.fields)}")
        else:
            parts.append(item)
    return "{" + ", ".join(parts) + "}"


def _param_value(value: Any) -> Any:
    if isinstance(value, datetime):
        # Naive datetimes are UTC
        return (value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value
