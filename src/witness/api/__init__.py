"""Flask application exposing the archive catalog as a read-only JSON API."""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from witness.archive.fetch import DocumentTextFetcher
from witness.catalog.catalog import ArchiveCatalog
from witness.config.models import WitnessConfig
from witness.manifest.errors import ManifestError
from witness.manifest.sources import DocumentSource, build_source
from witness.render.text import RenderOptions

from .routes import bp
from .state import ApiState

LOGGER = logging.getLogger(__name__)


def create_app(
    config: Optional[WitnessConfig] = None,
    *,
    source: Optional[DocumentSource] = None,
    fetcher: Optional[DocumentTextFetcher] = None,
) -> Flask:
    """Application factory for the metadata API.

    The catalog is loaded once at startup. A failed load leaves the application in
    a collection-level error state: catalog routes answer 503 until restarted.

    Args:
        config: Effective configuration; defaults apply when omitted.
        source: Document source override; built from ``config`` when omitted.
        fetcher: Document text fetcher override.

    Returns:
        Flask: Configured application.
    """
    config = config or WitnessConfig()
    logging.getLogger("witness").setLevel(config.logging.level.upper())
    app = Flask(__name__)
    app.json.sort_keys = False

    source = source or build_source(config)
    catalog: Optional[ArchiveCatalog] = None
    error: Optional[str] = None
    try:
        catalog = ArchiveCatalog.load(source, top_tags_limit=config.browse.top_tags_limit)
    except ManifestError as exc:
        error = str(exc)
        LOGGER.error("Failed to load archive catalog: %s", exc)

    app.extensions["witness"] = ApiState(
        catalog=catalog,
        error=error,
        fetcher=fetcher or DocumentTextFetcher.from_config(config),
        render_options=RenderOptions.from_settings(config.render),
        related_limit=config.browse.related_limit,
    )
    app.register_blueprint(bp)
    register_error_handlers(app)
    LOGGER.info("Witness API created (catalog loaded: %s)", catalog is not None)
    return app


def register_error_handlers(app: Flask) -> None:
    """Render HTTP errors as JSON bodies."""

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        response = jsonify({"error": {"code": exc.code, "message": exc.description}})
        return response, exc.code


__all__ = ["create_app", "register_error_handlers"]
