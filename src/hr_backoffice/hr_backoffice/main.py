from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .api.controller import register as register_api
from .common.logging import get_logger, setup_logging
from .common.responses import success_response
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .database.seed import seed_demo_data

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(**overrides) -> Flask:
    """Application factory.

    `overrides` replace settings-module values (tests pass STORE_BACKEND="memory").
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    def setting(name: str, default=None):
        return overrides.get(name, getattr(settings, name, default))

    setup_logging(setting("LOG_LEVEL", "INFO"))
    log = get_logger(__name__)

    app.secret_key = setting("SECRET_KEY")
    app.config["DEBUG"] = bool(setting("DEBUG", False))
    app.config["TESTING"] = bool(setting("TESTING", False))
    app.config["DEMO_MODE"] = bool(setting("DEMO_MODE", False))
    app.config["AUTH_EMAIL_HEADER"] = setting("AUTH_EMAIL_HEADER")

    store_backend = setting("STORE_BACKEND", "mysql")
    db_config = setting("DB_CONFIG", {})
    log.info(
        "app_starting",
        settings=settings_module,
        store=store_backend,
        db=DBConfig.from_mapping(db_config).label if store_backend == "mysql" else None,
    )

    if store_backend == "mysql" and setting("AUTO_INIT_DB", False):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        log.info("schema_ready", tables=len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        store_backend=store_backend,
        store=overrides.get("STORE"),
        approver_policy=setting("APPROVER_POLICY", "live"),
        enforce_blackout_on_submit=bool(setting("ENFORCE_BLACKOUT_ON_SUBMIT", False)),
        smtp=setting("SMTP_CONFIG"),
        calendar_webhook_url=setting("CALENDAR_WEBHOOK_URL"),
    )
    app.extensions["hr_backoffice"] = container

    if setting("AUTO_SEED_DB", False):
        inserted = seed_demo_data(container.store)
        log.info("demo_seed_ready", inserted=inserted)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify(success_response({"status": "ok"}))

    register_api(app, container)

    return app
