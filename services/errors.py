"""Error taxonomy for a pipeline run.

Per-document problems are never raised: they become ValidationError values
and flow into the reporter. Only run-level conditions are exceptions.
"""

from dataclasses import dataclass

IO = "io"
PARSE = "parse"
SCHEMA = "schema"
SLUG_COLLISION = "slug_collision"


@dataclass(frozen=True)
class ValidationError:
    source_path: str
    field: str | None
    message: str
    kind: str = SCHEMA

    def to_dict(self) -> dict:
        return {
            "source_path": self.source_path,
            "field": self.field,
            "message": self.message,
            "kind": self.kind,
        }

    def __str__(self) -> str:
        where = f"{self.source_path} [{self.field}]" if self.field else self.source_path
        return f"{where}: {self.message}"


class ContentRootError(Exception):
    """The content root is missing or unreadable. Nothing can be validated."""


class UnknownSchema(LookupError):
    pass


class NotFound(LookupError):
    pass


class BuildFailed(Exception):
    """Raised at the end of a fail-fast run that collected any errors."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} content error(s); build aborted")
