"""Error aggregation and build policy (fail-fast vs best-effort)."""

import json
import logging
import threading

from services.errors import BuildFailed, ValidationError

log = logging.getLogger(__name__)

FAIL_FAST = "fail-fast"
BEST_EFFORT = "best-effort"
MODES = (FAIL_FAST, BEST_EFFORT)


def _sort_key(err: ValidationError):
    return (err.source_path, err.field or "", err.kind, err.message)


class ErrorReporter:
    """Collects ValidationErrors from every stage of one pipeline run."""

    def __init__(self, mode: str = FAIL_FAST):
        if mode not in MODES:
            msg = f"Unknown build mode: {mode!r} (expected one of {', '.join(MODES)})"
            raise ValueError(msg)
        self.mode = mode
        self._errors: list[ValidationError] = []
        self._lock = threading.Lock()

    def add(self, error: ValidationError) -> None:
        with self._lock:
            self._errors.append(error)

    def extend(self, errors) -> None:
        with self._lock:
            self._errors.extend(errors)

    @property
    def errors(self) -> list[ValidationError]:
        with self._lock:
            return sorted(self._errors, key=_sort_key)

    @property
    def failed_paths(self) -> set[str]:
        with self._lock:
            return {e.source_path for e in self._errors}

    def __bool__(self) -> bool:
        with self._lock:
            return bool(self._errors)

    def finish(self) -> list[ValidationError]:
        """Apply the build policy. Raises BuildFailed in fail-fast mode if anything failed."""
        errors = self.errors
        if not errors:
            return errors
        if self.mode == FAIL_FAST:
            raise BuildFailed(errors)
        for err in errors:
            log.warning("Excluded %s", err)
        return errors


def render_text(errors: list[ValidationError], published: int | None = None) -> str:
    lines = [str(e) for e in errors]
    excluded = len({e.source_path for e in errors})
    if errors:
        lines.append(f"{len(errors)} error(s) in {excluded} document(s).")
    else:
        lines.append("No content errors.")
    if published is not None:
        lines.append(f"{published} document(s) published.")
    return "\n".join(lines)


def render_json(errors: list[ValidationError], published: int | None = None) -> str:
    data = {
        "ok": not errors,
        "errors": [e.to_dict() for e in errors],
        "excluded": sorted({e.source_path for e in errors}),
    }
    if published is not None:
        data["published"] = published
    return json.dumps(data, indent=2)
