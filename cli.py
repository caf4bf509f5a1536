#!/usr/bin/env python3
"""validate-content — build a content collection and report every error."""

import argparse
import logging
import os
import sys
import time

from services.errors import BuildFailed, ContentRootError, UnknownSchema
from services.pipeline import build_collection
from services.report import BEST_EFFORT, FAIL_FAST, render_json, render_text
from services.schema import SCHEMAS, get_schema
from services.settings import (
    REPORT_FORMATS,
    add_collection,
    get_collection,
    load_settings,
    remove_collection,
)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_IO = 2


def _render(errors, fmt: str, published: int | None = None) -> str:
    if fmt == "json":
        return render_json(errors, published=published)
    return render_text(errors, published=published)


def _build_parser(settings: dict) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="validate-content",
        description="Validate a directory of markdown content and its front matter.",
    )
    parser.add_argument(
        "root",
        nargs="?",
        help="Content root directory (default: path of the --collection from settings)",
    )
    parser.add_argument(
        "--collection", default="blog", help="Registered collection to use when root is omitted"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--fail-fast",
        dest="mode",
        action="store_const",
        const=FAIL_FAST,
        help="Any error fails the build",
    )
    mode.add_argument(
        "--best-effort",
        dest="mode",
        action="store_const",
        const=BEST_EFFORT,
        help="Exclude failing documents and publish the rest",
    )
    parser.add_argument("--format", choices=REPORT_FORMATS, default=settings["report"]["format"])
    parser.add_argument("--schema", choices=sorted(SCHEMAS), help="Schema name (default: blog)")
    parser.add_argument("--workers", type=int, default=settings["build"]["workers"])
    parser.add_argument("--watch", action="store_true", help="Rebuild whenever content changes")
    registry = parser.add_mutually_exclusive_group()
    registry.add_argument(
        "--add-collection",
        metavar="NAME",
        help="Register root under NAME (with --schema, default blog) and exit",
    )
    registry.add_argument(
        "--remove-collection", metavar="NAME", help="Unregister collection NAME and exit"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.set_defaults(mode=settings["build"]["mode"])
    return parser


def _watch(root, schema, args, settings) -> int:
    from services.watcher import CollectionWatcher

    def report(result, errors):
        published = len(result.collection) if result else None
        print(_render(errors, args.format, published=published), flush=True)

    watcher = CollectionWatcher(
        root,
        schema,
        mode=args.mode,
        workers=max(1, args.workers),
        extensions=settings["build"]["extensions"],
        debounce_seconds=settings["watch"]["debounce_seconds"],
        on_rebuild=report,
    )
    try:
        watcher.start()
    except OSError as e:
        print(f"Cannot watch {root}: {e}", file=sys.stderr)
        return EXIT_IO
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
    return EXIT_OK


def _manage_collections(args) -> int:
    if args.remove_collection:
        ok, err = remove_collection(args.remove_collection)
        name = args.remove_collection
    else:
        if not args.root:
            print("--add-collection needs a content root", file=sys.stderr)
            return EXIT_IO
        name = args.add_collection
        ok, err = add_collection(name, os.path.abspath(args.root), args.schema or "blog")
    if not ok:
        print(err, file=sys.stderr)
        return EXIT_IO
    action = "Removed" if args.remove_collection else "Registered"
    print(f'{action} collection "{name}"')
    return EXIT_OK


def main(argv=None) -> int:
    """Entry point for the `validate-content` command."""
    settings = load_settings()
    args = _build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    if args.add_collection or args.remove_collection:
        return _manage_collections(args)

    root = args.root
    schema_name = args.schema
    if root is None:
        entry, err = get_collection(args.collection)
        if err:
            print(err, file=sys.stderr)
            return EXIT_IO
        root = entry["path"]
        schema_name = schema_name or entry["schema"]
    try:
        schema = get_schema(schema_name or "blog")
    except UnknownSchema as e:
        print(str(e), file=sys.stderr)
        return EXIT_IO

    if args.watch:
        return _watch(root, schema, args, settings)

    try:
        result = build_collection(
            root,
            schema,
            mode=args.mode,
            workers=max(1, args.workers),
            extensions=settings["build"]["extensions"],
        )
    except ContentRootError as e:
        print(str(e), file=sys.stderr)
        return EXIT_IO
    except BuildFailed as e:
        print(_render(e.errors, args.format, published=0))
        return EXIT_INVALID

    print(_render(result.errors, args.format, published=len(result.collection)))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
