"""Tests for structured document queries."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from blog_dashboard.store.query import DocumentQuery, Projection


def test_render_type_filter_only():
    """Test a bare type query binds the type as a parameter."""
    groq, params = DocumentQuery.of_type("post").render()

    assert groq == "*[_type == $type]"
    assert params == {"type": "post"}


def test_render_full_listing():
    """Test ordering, slicing and projection render in GROQ order."""
    query = (
        DocumentQuery.of_type("post")
        .order_by("publishedAt", descending=True)
        .order_by("_createdAt", descending=True)
        .slice(10, 10)
        .project("_id", "title")
    )

    groq, params = query.render()

    assert groq == "*[_type == $type] | order(publishedAt desc, _createdAt desc) [10...20] {_id, title}"
    assert params == {"type": "post"}


def test_render_conditions_are_parameterized():
    """Test condition values never appear inside the query text."""
    start = datetime(2024, 1, 1, tzinfo=UTC)
    query = (
        DocumentQuery.of_type("post")
        .where("slug.current", "==", "hello' || true")
        .where("publishedAt", ">=", start)
    )

    groq, params = query.render()

    assert groq == "*[_type == $type && slug.current == $p0 && dateTime(publishedAt) >= dateTime($p1)]"
    assert params["p0"] == "hello' || true"
    assert params["p1"] == "2024-01-01T00:00:00+00:00"
    assert "hello" not in groq


def test_render_first_only():
    """Test a first-only query renders the [0] accessor."""
    groq, _ = DocumentQuery.of_type("post").where("slug.current", "==", "x").first_only().render()

    assert groq == "*[_type == $type && slug.current == $p0][0]"


def test_render_count_ignores_ordering_and_projection():
    """Test count queries drop ordering and projection."""
    query = DocumentQuery.of_type("post").order_by("title").project("_id").counted()

    assert query.render() == ("count(*[_type == $type])", {"type": "post"})


def test_render_nested_and_dereferenced_projection():
    """Test nested projections and reference following."""
    query = DocumentQuery.of_type("post").project(
        "_id",
        Projection("author", ("name",)),
        Projection("featuredImage", (Projection("asset", ("_id", "url"), dereference=True), "alt")),
    )

    groq, _ = query.render()

    assert groq == "*[_type == $type] {_id, author{name}, featuredImage{asset->{_id, url}, alt}}"


def test_render_without_type():
    """Test a query without a type filters on its conditions only."""
    groq, params = DocumentQuery().where("status", "==", "draft").render()

    assert groq == "*[status == $p0]"
    assert params == {"p0": "draft"}


def test_date_parameter_is_isoformatted():
    """Test date parameters are sent as ISO-8601 strings."""
    _, params = DocumentQuery().where("plannedDate", "<=", date(2024, 3, 31)).render()

    assert params == {"p0": "2024-03-31"}


def test_builders_return_new_queries():
    """Test each builder call returns a new query."""
    base = DocumentQuery.of_type("post")
    filtered = base.where("status", "==", "draft")

    assert base.conditions == ()
    assert len(filtered.conditions) == 1


def test_unsupported_operator_rejected():
    """Test operators outside the supported set are rejected."""
    with pytest.raises(ValueError, match="Unsupported operator"):
        DocumentQuery.of_type("post").where("title", "match", "x")


def test_negative_slice_rejected():
    """Test negative offsets and limits are rejected."""
    with pytest.raises(ValueError):
        DocumentQuery.of_type("post").slice(-1, 10)


def test_datetime_parameter_is_normalized_to_utc():
    """Test aware bounds are converted to UTC and naive ones taken as UTC."""
    plus_two = timezone(timedelta(hours=2))
    query = (
        DocumentQuery()
        .where("publishedAt", ">=", datetime(2024, 1, 5, 11, 0, tzinfo=plus_two))
        .where("publishedAt", "<", datetime(2024, 1, 6, 9, 0))
    )

    groq, params = query.render()

    assert groq == "*[dateTime(publishedAt) >= dateTime($p0) && dateTime(publishedAt) < dateTime($p1)]"
    assert params == {"p0": "2024-01-05T09:00:00+00:00", "p1": "2024-01-06T09:00:00+00:00"}


def test_datetime_equality_is_not_wrapped():
    """Test only range comparisons on datetimes go through dateTime()."""
    groq, params = DocumentQuery().where("publishedAt", "==", datetime(2024, 1, 5, tzinfo=UTC)).render()

    assert groq == "*[publishedAt == $p0]"
    assert params == {"p0": "2024-01-05T00:00:00+00:00"}
