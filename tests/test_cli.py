"""Tests for the validate-content command."""

import json
from unittest.mock import patch

import pytest

from cli import EXIT_INVALID, EXIT_IO, EXIT_OK, main

POST = "---\ntitle: {title}\ndescription: d\npubDate: 2025-12-19\n---\nBody\n"
UNTITLED = "---\ndescription: d\npubDate: 'Dec 19 2025'\n---\nBody\n"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path):
    """Point the settings file at an empty temp location."""
    settings_file = tmp_path / "config" / "settings.json"
    with (
        patch("services.settings._SETTINGS_DIR", str(settings_file.parent)),
        patch("services.settings._SETTINGS_FILE", str(settings_file)),
    ):
        yield settings_file


@pytest.fixture()
def content(tmp_path):
    root = tmp_path / "content"
    root.mkdir()
    for i in range(50):
        (root / f"post-{i:02}.md").write_text(POST.format(title=f"Post {i}"))
    return root


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


def test_valid_content_exits_zero(content, capsys):
    assert main([str(content)]) == EXIT_OK
    out = capsys.readouterr().out
    assert "No content errors." in out
    assert "50 document(s) published." in out


def test_fail_fast_one_invalid(content, capsys):
    (content / "untitled.md").write_text(UNTITLED)
    assert main([str(content), "--fail-fast"]) == EXIT_INVALID
    out = capsys.readouterr().out
    assert "untitled.md [title]: missing required field title" in out
    assert "0 document(s) published." in out


def test_fail_fast_is_default(content):
    (content / "untitled.md").write_text(UNTITLED)
    assert main([str(content)]) == EXIT_INVALID


def test_best_effort_publishes_rest(content, capsys):
    (content / "untitled.md").write_text(UNTITLED)
    assert main([str(content), "--best-effort", "--format=json"]) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data["published"] == 50
    assert data["excluded"] == ["untitled.md"]
    assert data["errors"][0]["field"] == "title"


def test_missing_root_exits_two(tmp_path, capsys):
    assert main([str(tmp_path / "does-not-exist")]) == EXIT_IO
    assert "not found" in capsys.readouterr().err


def test_modes_are_exclusive(content):
    with pytest.raises(SystemExit) as exc:
        main([str(content), "--fail-fast", "--best-effort"])
    assert exc.value.code == 2


# ---------------------------------------------------------------------------
# Options and settings
# ---------------------------------------------------------------------------


def test_json_format_clean(content, capsys):
    assert main([str(content), "--format", "json", "--workers", "1"]) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data == {"ok": True, "errors": [], "excluded": [], "published": 50}


def test_schema_option(tmp_path, capsys):
    root = tmp_path / "docs"
    root.mkdir()
    (root / "intro.md").write_text("---\ntitle: Intro\n---\nWelcome\n")
    assert main([str(root), "--schema", "docs"]) == EXIT_OK
    assert main([str(root), "--schema", "blog"]) == EXIT_INVALID


def test_registered_collection(tmp_path, isolated_settings, capsys):
    root = tmp_path / "handbook"
    root.mkdir()
    (root / "intro.md").write_text("---\ntitle: Intro\n---\n")
    isolated_settings.parent.mkdir(parents=True)
    isolated_settings.write_text(
        json.dumps({"collections": {"handbook": {"path": str(root), "schema": "docs"}}})
    )
    assert main(["--collection", "handbook"]) == EXIT_OK
    assert "1 document(s) published." in capsys.readouterr().out


def test_unknown_collection(capsys):
    assert main(["--collection", "nope"]) == EXIT_IO
    assert 'Unknown collection: "nope"' in capsys.readouterr().err


def test_settings_mode_default(content, isolated_settings, capsys):
    (content / "untitled.md").write_text(UNTITLED)
    isolated_settings.parent.mkdir(parents=True)
    isolated_settings.write_text(json.dumps({"build": {"mode": "best-effort"}}))
    assert main([str(content)]) == EXIT_OK


# ---------------------------------------------------------------------------
# Collection registry
# ---------------------------------------------------------------------------


def test_add_collection_then_build_by_name(tmp_path, isolated_settings, capsys):
    root = tmp_path / "handbook"
    root.mkdir()
    (root / "intro.md").write_text("---\ntitle: Intro\n---\n")

    assert main([str(root), "--add-collection", "handbook", "--schema", "docs"]) == EXIT_OK
    assert 'Registered collection "handbook"' in capsys.readouterr().out

    saved = json.loads(isolated_settings.read_text())
    assert saved["collections"]["handbook"] == {"path": str(root), "schema": "docs"}
    assert main(["--collection", "handbook"]) == EXIT_OK


def test_add_collection_needs_root(capsys):
    assert main(["--add-collection", "handbook"]) == EXIT_IO
    assert "needs a content root" in capsys.readouterr().err


def test_add_collection_missing_path(tmp_path, capsys):
    assert main([str(tmp_path / "nope"), "--add-collection", "x"]) == EXIT_IO
    assert "Path does not exist" in capsys.readouterr().err


def test_remove_collection(content, capsys):
    main([str(content), "--add-collection", "notes"])
    assert main(["--remove-collection", "notes"]) == EXIT_OK
    assert 'Removed collection "notes"' in capsys.readouterr().out
    assert main(["--collection", "notes"]) == EXIT_IO


def test_remove_unknown_collection(capsys):
    assert main(["--remove-collection", "ghost"]) == EXIT_IO
    assert 'Collection "ghost" not found' in capsys.readouterr().err
