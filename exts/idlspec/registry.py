from __future__ import annotations

from pathlib import Path

from sphinx.application import Sphinx
from sphinx.environment import BuildEnvironment
from sphinx.util import logging

from .record_store import _ensure_env, _record_error
from .transport import HttpXrefClient, XrefDatabase, XrefDatabaseError

LOGGER = logging.getLogger(__name__)


def _configure_xref_lookup(app: Sphinx, env: BuildEnvironment) -> None:
    """Attach the configured lookup transport to the app, if any."""
    _ensure_env(env)
    app.idlspec_xref_lookup = None

    database_path_raw = str(app.config.idlspec_xref_database_path).strip()
    if database_path_raw:
        database_path = Path(database_path_raw)
        if not database_path.is_absolute():
            database_path = Path(app.confdir) / database_path
        if not database_path.exists():
            _record_error(env, f"xref database missing: {database_path}")
            return
        try:
            database = XrefDatabase.load(database_path)
        except XrefDatabaseError as exc:
            _record_error(env, str(exc))
            return
        LOGGER.info(
            "idlspec: loaded %d xref term(s) from %s",
            len(database.terms),
            database_path,
        )
        app.idlspec_xref_lookup = database.lookup
        return

    url = str(app.config.idlspec_xref_url).strip()
    if url:
        client = HttpXrefClient(url, timeout=float(app.config.idlspec_xref_timeout))
        app.idlspec_xref_lookup = client.lookup
