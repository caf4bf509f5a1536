"""Front matter decoding: YAML text to a loosely typed mapping."""

import yaml

from services.errors import PARSE, ValidationError

# Line 1 of every content file is the opening delimiter.
_BLOCK_OFFSET = 2


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that leaves impossible timestamps (2025-02-30) as strings."""

    def construct_yaml_timestamp(self, node):
        try:
            return super().construct_yaml_timestamp(node)
        except ValueError:
            return self.construct_scalar(node)


_FrontMatterLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", _FrontMatterLoader.construct_yaml_timestamp
)


def _describe(exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None)
    problem = getattr(exc, "problem", None) or str(exc).splitlines()[0]
    if mark is not None:
        return f"malformed front matter at line {mark.line + _BLOCK_OFFSET}: {problem}"
    return f"malformed front matter: {problem}"


def parse_frontmatter(
    text: str, source_path: str = ""
) -> tuple[dict | None, ValidationError | None]:
    """Decode a front matter block. Returns (fields, None) or (None, error).

    Valid ISO dates come back as datetime.date; other date spellings, and ISO
    dates that do not exist on the calendar, stay strings for the validator.
    """
    if not text.strip():
        return {}, None

    try:
        raw = yaml.load(text, Loader=_FrontMatterLoader)
    except yaml.YAMLError as e:
        return None, ValidationError(source_path, None, _describe(e), PARSE)

    if raw is None:
        return {}, None
    if not isinstance(raw, dict):
        got = type(raw).__name__
        return None, ValidationError(
            source_path, None, f"front matter must be a mapping of fields, got {got}", PARSE
        )

    return {str(k): v for k, v in raw.items()}, None
