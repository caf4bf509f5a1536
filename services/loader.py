"""Content discovery and front matter / body splitting."""

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from config import CONTENT_EXTENSIONS
from services.errors import IO, PARSE, ContentRootError, ValidationError

log = logging.getLogger(__name__)

DELIMITER = "---"


@dataclass(frozen=True)
class RawDocument:
    path: str
    rel_path: str
    frontmatter_text: str
    body: str


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def split_frontmatter(text: str) -> tuple[str, str, str | None]:
    """Split file content into (frontmatter_text, body, error).

    The block sits between the first two standalone ``---`` lines and must
    open on line 1. Without an opening delimiter the whole file is body.
    The body is everything after the closing delimiter line, untouched.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return "", text, None

    for i, line in enumerate(lines[1:], 1):
        if _is_delimiter(line):
            return "".join(lines[1:i]), "".join(lines[i + 1 :]), None

    return "", text, "unterminated front matter: no closing '---' after line 1"


def iter_content_files(
    root: str,
    extensions=CONTENT_EXTENSIONS,
    on_error: Callable[[ValidationError], None] | None = None,
) -> Iterator[str]:
    """Yield absolute paths of content files under root, in sorted order.

    A subdirectory that cannot be listed is handed to on_error as an io error;
    the walk carries on with its siblings.
    """
    if not os.path.isdir(root):
        raise ContentRootError(f"Content root not found: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ContentRootError(f"Content root not readable: {root}")

    def _unreadable(exc: OSError) -> None:
        rel_dir = relative_path(exc.filename or root, root)
        log.warning("Cannot list %s: %s", rel_dir, exc)
        if on_error:
            on_error(
                ValidationError(rel_dir, None, f"unreadable directory: {exc.strerror or exc}", IO)
            )

    suffixes = tuple(ext.lower() for ext in extensions)
    for dirpath, dirs, files in os.walk(root, onerror=_unreadable):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for fname in sorted(files):
            if fname.startswith("."):
                continue
            if os.path.splitext(fname)[1].lower() in suffixes:
                yield os.path.join(dirpath, fname)


def relative_path(path: str, root: str) -> str:
    """Root-relative path with forward slashes."""
    return os.path.relpath(path, root).replace(os.sep, "/")


def load_document(path: str, root: str) -> tuple[RawDocument | None, ValidationError | None]:
    """Read one content file. Returns (document, None) or (None, error)."""
    rel_path = relative_path(path, root)
    try:
        # newline="" keeps \r\n intact so the body round-trips exactly
        with open(path, encoding="utf-8", newline="") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        return None, ValidationError(rel_path, None, f"file is not valid UTF-8: {e.reason}", IO)
    except OSError as e:
        return None, ValidationError(rel_path, None, f"unreadable file: {e.strerror or e}", IO)

    fm_text, body, err = split_frontmatter(content)
    if err:
        return None, ValidationError(rel_path, None, err, PARSE)

    log.debug("Loaded %s (%d bytes of front matter)", rel_path, len(fm_text))
    return RawDocument(path=path, rel_path=rel_path, frontmatter_text=fm_text, body=body), None


def iter_documents(
    root: str,
    extensions=CONTENT_EXTENSIONS,
    on_error: Callable[[ValidationError], None] | None = None,
) -> Iterator[RawDocument]:
    """Lazily load every content file under root.

    A file that cannot be read is handed to on_error and skipped; enumeration
    continues with the next file.
    """
    for path in iter_content_files(root, extensions, on_error):
        doc, err = load_document(path, root)
        if err:
            if on_error:
                on_error(err)
            continue
        yield doc
