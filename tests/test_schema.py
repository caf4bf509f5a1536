"""Unit tests for content schemas and front matter validation."""

import dataclasses
from datetime import date, datetime

import pytest

from services.errors import SCHEMA, UnknownSchema
from services.schema import BLOG_SCHEMA, DOCS_SCHEMA, get_schema, parse_date, validate_frontmatter

VALID = {
    "title": "Hello",
    "description": "A post",
    "pubDate": date(2025, 12, 19),
}


# ---------------------------------------------------------------------------
# parse_date
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value",
    [
        date(2025, 12, 19),
        datetime(2025, 12, 19, 8, 30),
        "2025-12-19",
        "2025-12-19T10:30:00Z",
        "Dec 19 2025",
        "December 19 2025",
    ],
)
def test_parse_date_accepted_forms(value):
    assert parse_date(value) == date(2025, 12, 19)


@pytest.mark.parametrize("value", ["yesterday", "Dexember 19 2025", "2025-13-01", 20251219, True])
def test_parse_date_rejects(value):
    assert parse_date(value) is None


# ---------------------------------------------------------------------------
# validate_frontmatter — happy path
# ---------------------------------------------------------------------------


def test_validate_ok_with_defaults():
    data, errors = validate_frontmatter(dict(VALID), BLOG_SCHEMA, "hello.md")
    assert errors == []
    assert data.title == "Hello"
    assert data.pubDate == date(2025, 12, 19)
    assert data.updatedDate is None
    assert data.heroImage is None
    assert data.tags == ()
    assert data.draft is False
    assert data.slug is None


def test_validate_coerces_month_day_year():
    data, errors = validate_frontmatter({**VALID, "pubDate": "Dec 19 2025"}, BLOG_SCHEMA)
    assert errors == []
    assert data.pubDate == date(2025, 12, 19)


def test_validate_optional_fields():
    fm = {
        **VALID,
        "updatedDate": "2025-12-20",
        "heroImage": "/blog-placeholder-1.jpg",
        "tags": ["python", "rust"],
        "draft": "yes",
    }
    data, errors = validate_frontmatter(fm, BLOG_SCHEMA)
    assert errors == []
    assert data.updatedDate == date(2025, 12, 20)
    assert data.heroImage == "/blog-placeholder-1.jpg"
    assert data.tags == ("python", "rust")
    assert data.draft is True


def test_validate_drops_unknown_fields():
    data, errors = validate_frontmatter({**VALID, "layout": "post", "author": "x"}, BLOG_SCHEMA)
    assert errors == []
    assert not hasattr(data, "layout")
    assert not hasattr(data, "author")


def test_record_is_frozen():
    data, _ = validate_frontmatter(dict(VALID), BLOG_SCHEMA)
    with pytest.raises(dataclasses.FrozenInstanceError):
        data.title = "changed"


def test_record_type_is_per_schema():
    assert BLOG_SCHEMA.record_type is BLOG_SCHEMA.record_type
    assert BLOG_SCHEMA.record_type is not DOCS_SCHEMA.record_type
    names = [f.name for f in dataclasses.fields(DOCS_SCHEMA.record_type)]
    assert names == ["title", "description", "order", "tags", "draft", "slug"]


# ---------------------------------------------------------------------------
# validate_frontmatter — errors
# ---------------------------------------------------------------------------


def test_missing_title_message():
    fm = {"description": "d", "pubDate": "Dec 19 2025"}
    data, errors = validate_frontmatter(fm, BLOG_SCHEMA, "post.md")
    assert data is None
    assert len(errors) == 1
    assert errors[0].field == "title"
    assert errors[0].message == "missing required field title"
    assert errors[0].source_path == "post.md"
    assert errors[0].kind == SCHEMA


def test_null_counts_as_missing():
    data, errors = validate_frontmatter({**VALID, "title": None}, BLOG_SCHEMA)
    assert data is None
    assert errors[0].message == "missing required field title"


def test_all_errors_collected():
    fm = {"title": 42, "pubDate": "someday", "tags": "python"}
    data, errors = validate_frontmatter(fm, BLOG_SCHEMA)
    assert data is None
    assert {e.field for e in errors} == {"title", "description", "pubDate", "tags"}


def test_bad_value_is_echoed():
    _, errors = validate_frontmatter({**VALID, "pubDate": "someday"}, BLOG_SCHEMA)
    assert "'someday'" in errors[0].message


def test_empty_title_rejected():
    _, errors = validate_frontmatter({**VALID, "title": "   "}, BLOG_SCHEMA)
    assert errors[0].field == "title"
    assert "empty" in errors[0].message


def test_list_items_must_be_strings():
    _, errors = validate_frontmatter({**VALID, "tags": ["ok", 3]}, BLOG_SCHEMA)
    assert errors[0].field == "tags"


def test_boolean_rejects_garbage():
    _, errors = validate_frontmatter({**VALID, "draft": "maybe"}, BLOG_SCHEMA)
    assert errors[0].field == "draft"


def test_number_rejects_bool():
    _, errors = validate_frontmatter({"title": "Docs", "order": True}, DOCS_SCHEMA)
    assert errors[0].field == "order"


def test_updated_before_published():
    fm = {**VALID, "updatedDate": "2025-12-01"}
    data, errors = validate_frontmatter(fm, BLOG_SCHEMA)
    assert data is None
    assert len(errors) == 1
    assert errors[0].field == "updatedDate"
    assert "2025-12-01" in errors[0].message


def test_updated_same_day_ok():
    data, errors = validate_frontmatter({**VALID, "updatedDate": "2025-12-19"}, BLOG_SCHEMA)
    assert errors == []
    assert data.updatedDate == data.pubDate


def test_cross_field_skipped_when_fields_fail():
    fm = {"description": "d", "pubDate": "2025-12-19", "updatedDate": "2025-01-01"}
    _, errors = validate_frontmatter(fm, BLOG_SCHEMA)
    assert [e.field for e in errors] == ["title"]


# ---------------------------------------------------------------------------
# get_schema
# ---------------------------------------------------------------------------


def test_get_schema_known():
    assert get_schema("blog") is BLOG_SCHEMA
    assert get_schema("docs") is DOCS_SCHEMA


def test_get_schema_unknown():
    with pytest.raises(UnknownSchema):
        get_schema("recipes")
