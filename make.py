#!/usr/bin/env -S uv run
from __future__ import annotations

import argparse
import importlib
import json
from pathlib import Path

ROOT = Path(__file__).resolve().parent
CONF_DIR = ROOT / "docs"
SOURCE_DIR = ROOT / "docs"
OUT_DIR = ROOT / "build" / "html"
DOCTREE_DIR = ROOT / "build" / "doctrees"
XREF_DATABASE_PATH = ROOT / "docs" / "xref-database.json"


def _load_transport():
    try:
        return importlib.import_module("exts.idlspec.transport")
    except ModuleNotFoundError as exc:
        raise SystemExit(
            "missing Python dependencies for validation; run via ./make.py "
            "(uv launcher) or `pip install -e .` first"
        ) from exc


def _run_sphinx_html() -> None:
    OUT_DIR.mkdir(parents=True, exist_ok=True)
    DOCTREE_DIR.mkdir(parents=True, exist_ok=True)

    build_module = importlib.import_module("sphinx.cmd.build")

    args = [
        "-b",
        "html",
        "-W",
        "--keep-going",
        "-T",
        "-d",
        str(DOCTREE_DIR),
        str(SOURCE_DIR),
        str(OUT_DIR),
        "-c",
        str(CONF_DIR),
    ]
    code = build_module.build_main(args)
    if code != 0:
        raise SystemExit(code)


def _validate_xref_database(path: Path) -> None:
    transport = _load_transport()
    if not path.exists():
        raise SystemExit(f"missing xref database: {path}")
    try:
        transport.XrefDatabase.load(path)
    except transport.XrefDatabaseError as exc:
        raise SystemExit(f"xref database validation failed:\n{exc}") from exc


def cmd_validate(args: argparse.Namespace) -> None:
    _validate_xref_database(Path(args.database))
    print(f"xref database is valid: {args.database}")


def cmd_build(args: argparse.Namespace) -> None:
    cmd_validate(args)
    _run_sphinx_html()
    print(f"Wrote HTML build to: {OUT_DIR}")


def cmd_query(args: argparse.Namespace) -> None:
    transport = _load_transport()
    utils = importlib.import_module("exts.idlspec.utils")
    database = transport.XrefDatabase.load(Path(args.database))
    query = {
        "keys": [
            {
                "term": utils._norm_term(args.term),
                "specs": list(args.spec),
                "types": list(args.type),
            }
        ]
    }
    print(json.dumps(database.search(query), indent=2, sort_keys=True))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="idlspec make entrypoint (defaults to build when no command is provided)",
    )
    parser.add_argument(
        "--database",
        default=str(XREF_DATABASE_PATH),
        help="Path to the xref term database (JSON, JSONC or YAML).",
    )
    sub = parser.add_subparsers(dest="cmd")
    parser.set_defaults(func=cmd_build, cmd="build")

    p_validate = sub.add_parser(
        "validate", help="Validate the xref term database against its schema."
    )
    p_validate.set_defaults(func=cmd_validate)

    p_build = sub.add_parser("build", help="Run strict Sphinx HTML build.")
    p_build.set_defaults(func=cmd_build)

    p_query = sub.add_parser("query", help="Look a term up in the xref database.")
    p_query.add_argument("term")
    p_query.add_argument("--spec", action="append", default=[])
    p_query.add_argument("--type", action="append", default=[])
    p_query.set_defaults(func=cmd_query)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
