"""Content schemas and front matter validation.

A ContentSchema is a plain value passed to validate_frontmatter; nothing here
is global state. Each schema generates one frozen record type whose
attributes are exactly its declared fields, so renderers never see raw
front matter.
"""

import logging
from dataclasses import dataclass, make_dataclass
from datetime import date, datetime
from functools import cached_property

from services.errors import SCHEMA, UnknownSchema, ValidationError

log = logging.getLogger(__name__)

STRING = "string"
DATE = "date"
BOOLEAN = "boolean"
NUMBER = "number"
LIST = "list"

_DATE_FORMATS = ("%b %d %Y", "%B %d %Y")  # Dec 19 2025, December 19 2025
_TRUE = {"true", "yes", "on"}
_FALSE = {"false", "no", "off"}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: str = STRING
    required: bool = False
    default: object = None
    non_empty: bool = False


@dataclass(frozen=True)
class ContentSchema:
    name: str
    fields: tuple[FieldSpec, ...]
    sort_field: str | None = None
    # (later, earlier) pairs: later must not precede earlier when both are set
    not_before: tuple[tuple[str, str], ...] = ()

    @cached_property
    def record_type(self) -> type:
        cls_name = "".join(part.capitalize() for part in self.name.split("-")) + "FrontMatter"
        return make_dataclass(cls_name, [(f.name, object) for f in self.fields], frozen=True)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)


BLOG_SCHEMA = ContentSchema(
    name="blog",
    fields=(
        FieldSpec("title", STRING, required=True, non_empty=True),
        FieldSpec("description", STRING, required=True, non_empty=True),
        FieldSpec("pubDate", DATE, required=True),
        FieldSpec("updatedDate", DATE),
        FieldSpec("heroImage", STRING),
        FieldSpec("tags", LIST, default=()),
        FieldSpec("draft", BOOLEAN, default=False),
        FieldSpec("slug", STRING, non_empty=True),
    ),
    sort_field="pubDate",
    not_before=(("updatedDate", "pubDate"),),
)

DOCS_SCHEMA = ContentSchema(
    name="docs",
    fields=(
        FieldSpec("title", STRING, required=True, non_empty=True),
        FieldSpec("description", STRING),
        FieldSpec("order", NUMBER),
        FieldSpec("tags", LIST, default=()),
        FieldSpec("draft", BOOLEAN, default=False),
        FieldSpec("slug", STRING, non_empty=True),
    ),
)

SCHEMAS = {s.name: s for s in (BLOG_SCHEMA, DOCS_SCHEMA)}


def get_schema(name: str) -> ContentSchema:
    try:
        return SCHEMAS[name]
    except KeyError:
        msg = f"Unknown schema: {name!r} (available: {', '.join(sorted(SCHEMAS))})"
        raise UnknownSchema(msg) from None


# ── Coercion ─────────────────────────────────────────────────────────────────


def _coerce_string(spec: FieldSpec, value):
    if not isinstance(value, str):
        return None, f"field {spec.name} must be a string, got {type(value).__name__} {value!r}"
    if spec.non_empty and not value.strip():
        return None, f"field {spec.name} must not be empty"
    return value, None


def parse_date(value) -> date | None:
    """Parse a calendar date from a YAML value. Returns None when unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _coerce_date(spec: FieldSpec, value):
    parsed = parse_date(value)
    if parsed is None:
        return None, f"field {spec.name} is not a valid date: {value!r}"
    return parsed, None


def _coerce_boolean(spec: FieldSpec, value):
    if isinstance(value, bool):
        return value, None
    if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
        return value.strip().lower() in _TRUE, None
    return None, f"field {spec.name} must be a boolean, got {value!r}"


def _coerce_number(spec: FieldSpec, value):
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value, None
    return None, f"field {spec.name} must be a number, got {value!r}"


def _coerce_list(spec: FieldSpec, value):
    if not isinstance(value, list | tuple):
        return None, f"field {spec.name} must be a list, got {type(value).__name__} {value!r}"
    bad = [item for item in value if not isinstance(item, str)]
    if bad:
        return None, f"field {spec.name} must contain only strings, got {bad[0]!r}"
    return tuple(value), None


_COERCERS = {
    STRING: _coerce_string,
    DATE: _coerce_date,
    BOOLEAN: _coerce_boolean,
    NUMBER: _coerce_number,
    LIST: _coerce_list,
}


# ── Validation ───────────────────────────────────────────────────────────────


def validate_frontmatter(
    fm: dict, schema: ContentSchema, source_path: str = ""
) -> tuple[object | None, list[ValidationError]]:
    """Check fm against schema. Returns (typed_record, []) or (None, errors).

    Every problem in the document is reported; unknown fields are dropped.
    """
    errors = []
    values = {}

    for spec in schema.fields:
        value = fm.get(spec.name)
        if value is None:
            if spec.required:
                errors.append(
                    ValidationError(source_path, spec.name, f"missing required field {spec.name}")
                )
            else:
                values[spec.name] = spec.default
            continue

        coerced, problem = _COERCERS[spec.type](spec, value)
        if problem:
            errors.append(ValidationError(source_path, spec.name, problem, SCHEMA))
        else:
            values[spec.name] = coerced

    unknown = sorted(set(fm) - set(schema.field_names))
    if unknown:
        log.debug("%s: ignoring unknown fields %s", source_path, ", ".join(unknown))

    if errors:
        return None, errors

    for later, earlier in schema.not_before:
        if values.get(later) is not None and values.get(earlier) is not None:
            if values[later] < values[earlier]:
                errors.append(
                    ValidationError(
                        source_path,
                        later,
                        f"{later} ({values[later].isoformat()}) is before "
                        f"{earlier} ({values[earlier].isoformat()})",
                    )
                )

    if errors:
        return None, errors
    return schema.record_type(**values), []
