"""Read-only, ordered snapshot of validated content records."""

from collections.abc import Callable, Iterator
from dataclasses import asdict, dataclass
from datetime import date

from services.errors import NotFound


def _jsonable(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, tuple):
        return list(value)
    return value


@dataclass(frozen=True)
class ValidatedRecord:
    id: str
    slug: str
    data: object
    body: str
    source_path: str

    def to_dict(self, include_body: bool = True) -> dict:
        data = {k: _jsonable(v) for k, v in asdict(self.data).items()}
        result = {"id": self.id, "slug": self.slug, "source_path": self.source_path, "data": data}
        if include_body:
            result["body"] = self.body
        return result


def _sorted(records, sort_field: str | None) -> tuple:
    # Two stable passes: slug ascending, then sort field descending.
    ordered = sorted(records, key=lambda r: r.slug)
    if not sort_field:
        return tuple(ordered)
    dated = [r for r in ordered if getattr(r.data, sort_field, None) is not None]
    undated = [r for r in ordered if getattr(r.data, sort_field, None) is None]
    dated.sort(key=lambda r: getattr(r.data, sort_field), reverse=True)
    return tuple(dated + undated)


class Collection:
    """Records sorted newest first, ties broken by slug.

    Built once per pipeline run and never patched; a rebuild produces a new
    Collection.
    """

    def __init__(self, records=(), sort_field: str | None = None):
        self._records = _sorted(records, sort_field)
        self._by_id = {r.id: r for r in self._records}
        self._by_slug = {r.slug: r for r in self._records}
        self.sort_field = sort_field

    def all(self) -> tuple[ValidatedRecord, ...]:
        return self._records

    def by_id(self, record_id: str) -> ValidatedRecord:
        """Look a record up by id, falling back to its slug."""
        record = self._by_id.get(record_id) or self._by_slug.get(record_id)
        if record is None:
            raise NotFound(f"No content record with id {record_id!r}")
        return record

    def filter(self, predicate: Callable[[ValidatedRecord], bool]) -> Iterator[ValidatedRecord]:
        return (r for r in self._records if predicate(r))

    def published(self) -> Iterator[ValidatedRecord]:
        return self.filter(lambda r: not getattr(r.data, "draft", False))

    def with_tag(self, tag: str) -> Iterator[ValidatedRecord]:
        return self.filter(lambda r: tag in (getattr(r.data, "tags", None) or ()))

    def tags(self) -> list[str]:
        return sorted({t for r in self._records for t in (getattr(r.data, "tags", None) or ())})

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ValidatedRecord]:
        return iter(self._records)

    def __contains__(self, record_id) -> bool:
        return record_id in self._by_id
