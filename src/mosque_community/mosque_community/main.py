from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .activities.controller import register as register_activities
from .api.errors import register_error_handlers
from .areas.controller import register as register_areas
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .feeds.controller import register as register_feeds
from .logging_config import configure_logging
from .pickups.controller import register as register_pickups
from .prayers.controller import register as register_prayers
from .users.controller import register as register_users
from .wakeups.controller import register as register_wakeups

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_demo_users(db_config, default_password=str(getattr(settings, "DEFAULT_MEMBER_PASSWORD")))
        logger.info("demo seed ready")


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Tests pass a prebuilt ``container`` so no database is touched.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config, settings=settings)

    app.extensions["mosque_community"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_areas(app, container)
    register_prayers(app, container)
    register_activities(app, container)
    register_pickups(app, container)
    register_feeds(app, container)
    register_wakeups(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return {"success": True, "data": {"status": "ok"}}

    return app
