"""Route derivation and slug collision detection."""

import os
import re
from collections import defaultdict

from services.errors import SLUG_COLLISION, ValidationError

_WHITESPACE_RE = re.compile(r"\s+")


def _normalize_segment(segment: str) -> str:
    """Lowercase, whitespace runs to hyphens."""
    return _WHITESPACE_RE.sub("-", segment.strip()).lower()


def normalize_slug(slug: str) -> str:
    segments = [_normalize_segment(s) for s in slug.replace("\\", "/").split("/")]
    return "/".join(s for s in segments if s)


def derive_slug(rel_path: str, override: str | None = None) -> str:
    """Route for a document: its root-relative path without extension.

    An explicit override from front matter wins over the path.
    """
    if override:
        return normalize_slug(override)
    stem, _ext = os.path.splitext(rel_path.replace("\\", "/"))
    return normalize_slug(stem)


def resolve_slugs(candidates: dict[str, str]) -> tuple[dict[str, str], list[ValidationError]]:
    """Split {source_path: slug} into unique slugs and collision errors.

    Every document sharing a slug gets its own error and is dropped; none of
    them wins.
    """
    by_slug: dict[str, list[str]] = defaultdict(list)
    for path, slug in candidates.items():
        by_slug[slug].append(path)

    unique = {}
    errors = []
    for slug, paths in by_slug.items():
        if len(paths) == 1:
            unique[paths[0]] = slug
            continue
        paths = sorted(paths)
        for path in paths:
            others = ", ".join(p for p in paths if p != path)
            errors.append(
                ValidationError(
                    path,
                    "slug",
                    f"slug {slug!r} is also claimed by {others}",
                    SLUG_COLLISION,
                )
            )
    return unique, errors
