from __future__ import annotations

import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

project = "idlspec sample"
author = "idlspec contributors"
copyright = "2026, idlspec contributors"

extensions = [
    "myst_parser",
    "exts.idlspec",
    "exts.idlspec_lints",
]

source_suffix = {
    ".md": "markdown",
}

master_doc = "index"
exclude_patterns = [
    "_build",
]

nitpicky = True
show_warning_types = True
suppress_warnings: list[str] = []

html_theme = "alabaster"
html_static_path: list[str] = []

myst_enable_extensions = [
    "colon_fence",
]

idlspec_document_cite = "DOM"
idlspec_xref_database_path = str(REPO_ROOT / "docs" / "xref-database.json")
idlspec_xref_url = os.environ.get("IDLSPEC_XREF_URL", "")

idlspec_lint_root = os.environ.get("IDLSPEC_LINT_ROOT", "")
idlspec_lints_strict = bool(os.environ.get("IDLSPEC_LINTS_STRICT", ""))
