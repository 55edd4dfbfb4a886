"""
Flask application factory for the crontab editor.
Sets up: Config, logging, CORS, API blueprint, and health endpoint.
"""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS
from loguru import logger
from werkzeug.exceptions import RequestEntityTooLarge

from cronedit.config import get_config, set_config, AppConfig
from cronedit.logging_config import configure_logging


def create_app(config_object: AppConfig | None = None) -> Flask:
    """
    Flask application factory.
    """
    cfg = config_object or get_config()
    # The store is built lazily from the global config, so it must be this one
    set_config(cfg)
    configure_logging(cfg.logging)

    app = Flask(__name__)
    app.config.update(MAX_CONTENT_LENGTH=cfg.web.max_content_length)
    app.json.sort_keys = False

    CORS(app, resources={r"/api/*": {"origins": cfg.web.cors_origins}})

    from .api import api_bp  # defer import until app exists
    app.register_blueprint(api_bp, url_prefix="/api")

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(e):
        return jsonify({"ok": False, "error": f"Request body exceeds {cfg.web.max_content_length} bytes"}), 413

    @app.get("/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                "store": cfg.store.backend,
            }
        )

    logger.info(
        f"App initialized. Health at /health. store={cfg.store.backend} binary={cfg.store.crontab_binary}"
    )
    return app
