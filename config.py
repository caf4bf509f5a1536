"""Shared constants and path configuration for content collections."""

import json
import os

SETTINGS_FILE = os.path.expanduser("~/.config/content-collections/settings.json")
_DEFAULT_CONTENT_DIR = "src/content/blog"


def _read_setting(*keys, default=None):
    """Read a nested setting from the global settings file."""
    try:
        with open(SETTINGS_FILE) as f:
            data = json.load(f)
        for k in keys:
            data = data[k]
        return data
    except (FileNotFoundError, json.JSONDecodeError, KeyError, TypeError):
        return default


CONTENT_DIR = _read_setting("content_dir", default=_DEFAULT_CONTENT_DIR)
CONTENT_EXTENSIONS = (".md", ".mdx")
