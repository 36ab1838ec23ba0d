"""Command-line interface for promptpad.

- ``promptpad import PATH`` merges a CSV file into the store and saves it
- ``promptpad export [-o PATH]`` writes the store as CSV (stdout by default)
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import get_settings
from .errors import PromptpadError
from .logging_setup import configure_logging
from .store import RecordStore


def _cmd_import(store: RecordStore, args: argparse.Namespace) -> int:
    raw = Path(args.path).read_bytes()
    with store.saving():
        result = store.import_csv(raw)
    sys.stdout.write(f"imported {len(result.records)} records\n")
    if result.new_categories:
        sys.stdout.write("new categories: " + ", ".join(result.new_categories) + "\n")
    return 0


def _cmd_export(store: RecordStore, args: argparse.Namespace) -> int:
    body = store.export_csv_bytes()
    if body is None:
        sys.stderr.write("nothing to export\n")
        return 1
    if args.output in (None, "-"):
        sys.stdout.write(body.decode("utf-8"))
    else:
        Path(args.output).write_bytes(body)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="promptpad", description="Import and export prompts as CSV.")
    p.add_argument("--store", default=None, help="Store file (default: PROMPTPAD_STORE_PATH)")
    sub = p.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Merge a CSV file into the store")
    p_import.add_argument("path", help="CSV file to import")
    p_import.set_defaults(func=_cmd_import)

    p_export = sub.add_parser("export", help="Write the store as CSV")
    p_export.add_argument("-o", "--output", default=None, help="Output path or '-' for stdout")
    p_export.set_defaults(func=_cmd_export)

    args = p.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    if args.store:
        settings = settings.model_copy(update={"store_path": args.store})

    try:
        store = RecordStore.from_settings(settings)
        return args.func(store, args)
    except (OSError, PromptpadError) as ex:
        sys.stderr.write(f"error: {ex}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
