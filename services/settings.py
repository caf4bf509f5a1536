"""Settings persistence — build policy, report format, collections registry.

Stored in ~/.config/content-collections/settings.json, merged over defaults
on every load.
"""

import json
import os

from config import CONTENT_DIR, CONTENT_EXTENSIONS
from services.report import MODES
from services.schema import SCHEMAS

_SETTINGS_DIR = os.path.expanduser("~/.config/content-collections")
_SETTINGS_FILE = os.path.join(_SETTINGS_DIR, "settings.json")

REPORT_FORMATS = ("text", "json")

_DEFAULTS = {
    "build": {
        "mode": "fail-fast",
        "workers": 4,
        "extensions": list(CONTENT_EXTENSIONS),
    },
    "report": {
        "format": "text",
    },
    "watch": {
        "debounce_seconds": 0.5,
    },
}


def _default_collections() -> dict:
    return {"blog": {"path": CONTENT_DIR, "schema": "blog"}}


def _normalize_collection_entry(entry) -> dict:
    """Accept a bare path string or a {"path", "schema"} dict."""
    if isinstance(entry, str):
        return {"path": entry, "schema": "blog"}
    if isinstance(entry, dict):
        return {"path": entry.get("path", ""), "schema": entry.get("schema", "blog")}
    return {"path": str(entry), "schema": "blog"}


def load_settings() -> dict:
    """Load settings.json merged with defaults. Unknown values fall back to defaults."""
    try:
        with open(_SETTINGS_FILE) as f:
            saved = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        saved = {}
    if not isinstance(saved, dict):
        saved = {}

    settings = {}
    for key, default_val in _DEFAULTS.items():
        section = saved.get(key, {})
        settings[key] = {**default_val, **(section if isinstance(section, dict) else {})}

    if settings["build"]["mode"] not in MODES:
        settings["build"]["mode"] = _DEFAULTS["build"]["mode"]
    if settings["report"]["format"] not in REPORT_FORMATS:
        settings["report"]["format"] = _DEFAULTS["report"]["format"]
    extensions = settings["build"]["extensions"]
    if isinstance(extensions, (list, tuple)) and all(isinstance(e, str) for e in extensions):
        settings["build"]["extensions"] = list(extensions)
    else:
        settings["build"]["extensions"] = list(_DEFAULTS["build"]["extensions"])
    try:
        settings["build"]["workers"] = max(1, int(settings["build"]["workers"]))
    except (TypeError, ValueError):
        settings["build"]["workers"] = _DEFAULTS["build"]["workers"]

    collections = saved.get("collections")
    if not collections or not isinstance(collections, dict):
        collections = _default_collections()
    settings["collections"] = {
        name: _normalize_collection_entry(entry) for name, entry in collections.items()
    }
    settings["content_dir"] = saved.get("content_dir", CONTENT_DIR)
    return settings


def save_settings(settings: dict) -> None:
    """Persist known sections only."""
    os.makedirs(_SETTINGS_DIR, exist_ok=True)
    keys = (*_DEFAULTS, "collections", "content_dir")
    data = {key: settings[key] for key in keys if key in settings}
    with open(_SETTINGS_FILE, "w") as f:
        json.dump(data, f, indent=2)


def get_collection(name: str) -> tuple[dict | None, str | None]:
    """Look up a registered collection. Returns (entry, None) or (None, error_message)."""
    collections = load_settings()["collections"]
    entry = collections.get(name)
    if not entry:
        available = ", ".join(sorted(collections)) or "none"
        return None, f'Unknown collection: "{name}" (available: {available})'
    return entry, None


def add_collection(name: str, path: str, schema: str = "blog") -> tuple[bool, str]:
    """Register or update a collection. Returns (ok, error_message)."""
    if not name or not isinstance(name, str):
        return False, "Collection name is required"
    if not path or not isinstance(path, str):
        return False, "Collection path is required"
    if not os.path.isdir(path):
        return False, f"Path does not exist: {path}"
    if schema not in SCHEMAS:
        return False, f"Unknown schema: {schema}"

    settings = load_settings()
    settings["collections"][name] = {"path": path, "schema": schema}
    save_settings(settings)
    return True, ""


def remove_collection(name: str) -> tuple[bool, str]:
    settings = load_settings()
    if name not in settings["collections"]:
        return False, f'Collection "{name}" not found'
    del settings["collections"][name]
    save_settings(settings)
    return True, ""
