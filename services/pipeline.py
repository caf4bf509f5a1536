"""One build: load, parse, validate, resolve slugs, publish a Collection."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from config import CONTENT_EXTENSIONS
from services.collection import Collection, ValidatedRecord
from services.errors import ValidationError
from services.frontmatter import parse_frontmatter
from services.loader import iter_content_files, load_document
from services.report import FAIL_FAST, ErrorReporter
from services.schema import ContentSchema, validate_frontmatter
from services.slugs import derive_slug, resolve_slugs

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    collection: Collection
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class _Candidate:
    rel_path: str
    slug: str
    data: object
    body: str
    path: str


def process_document(path: str, root: str, schema: ContentSchema):
    """Load → parse → validate → derive slug for a single file.

    Returns (candidate, []) or (None, errors). Touches no shared state, so
    callers may run it on any thread.
    """
    doc, err = load_document(path, root)
    if err:
        return None, [err]

    fields, err = parse_frontmatter(doc.frontmatter_text, doc.rel_path)
    if err:
        return None, [err]

    typed, errors = validate_frontmatter(fields, schema, doc.rel_path)
    if errors:
        return None, errors

    slug = derive_slug(doc.rel_path, getattr(typed, "slug", None))
    if not slug:
        return None, [ValidationError(doc.rel_path, "slug", "resolved slug is empty")]
    return _Candidate(doc.rel_path, slug, typed, doc.body, doc.path), []


def build_collection(
    root: str,
    schema: ContentSchema,
    mode: str = FAIL_FAST,
    workers: int = 4,
    extensions=CONTENT_EXTENSIONS,
) -> BuildResult:
    """Run the whole pipeline over root and publish an immutable Collection.

    Raises ContentRootError if root cannot be read, and BuildFailed in
    fail-fast mode when any document failed. In best-effort mode failed
    documents are left out and listed in BuildResult.errors.
    """
    reporter = ErrorReporter(mode)
    paths = list(iter_content_files(root, extensions, on_error=reporter.add))
    log.info("Building %r collection from %s (%d files)", schema.name, root, len(paths))

    if workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda p: process_document(p, root, schema), paths))
    else:
        results = [process_document(p, root, schema) for p in paths]

    candidates = {}
    for candidate, errors in results:
        if errors:
            reporter.extend(errors)
        else:
            candidates[candidate.rel_path] = candidate

    unique, collisions = resolve_slugs({c.rel_path: c.slug for c in candidates.values()})
    reporter.extend(collisions)

    errors = reporter.finish()
    records = [
        ValidatedRecord(id=c.rel_path, slug=c.slug, data=c.data, body=c.body, source_path=c.path)
        for c in candidates.values()
        if c.rel_path in unique
    ]
    collection = Collection(records, schema.sort_field)
    log.info(
        "Published %d of %d documents (%d error(s))", len(collection), len(paths), len(errors)
    )
    return BuildResult(collection, errors)
