import os
import sys
import logging
import sqlite3
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException
from .config import Config

db = SQLAlchemy()

SCHEMA_VERSION = 1


def resource_path(relative_path: str) -> str:
    """
    Base path for templates/static.
    - frozen build: under sys._MEIPASS
    - source checkout: beside this package
    """
    if getattr(sys, "frozen", False):
        base = getattr(sys, "_MEIPASS", os.path.dirname(sys.executable))
    else:
        base = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(base, relative_path)


def sqlite_path_from_uri(uri: str):
    if not uri or not uri.startswith("sqlite:///"):
        return None
    path = uri.replace("sqlite:///", "", 1)
    if not path or path == ":memory:":
        return None
    return path


# --- migration helpers ---

def ensure_table_exists(conn, table_name):
    cur = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table_name,))
    return cur.fetchone() is not None


def safe_set_pragma(conn, sql):
    try:
        conn.execute(sql)
        conn.commit()
    except sqlite3.Error as e:
        logging.warning("PRAGMA failed: %s (%s)", sql, e)


def get_user_version(conn):
    return conn.execute("PRAGMA user_version").fetchone()[0]


def set_user_version(conn, version):
    conn.execute(f"PRAGMA user_version = {int(version)}")
    conn.commit()


def ensure_column_exists(conn, table, column, coldef):
    if not ensure_table_exists(conn, table):
        logging.error("[MIG] Table '%s' does not exist; cannot add column '%s'", table, column)
        return
    cur = conn.execute(f"PRAGMA table_info({table})")
    cols = [row[1] for row in cur.fetchall()]
    if column in cols:
        logging.debug("[MIG] Column '%s' already exists in '%s'", column, table)
        return
    logging.info("[MIG] Adding column '%s' to '%s' (%s)", column, table, coldef)
    conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {coldef}")
    conn.commit()


def apply_migrations(conn):
    """Bring databases created by older builds up to the current columns."""
    logging.info("[MIG] start apply_migrations user_version=%s", get_user_version(conn))
    try:
        ensure_column_exists(conn, "customers", "company_name", "TEXT")
        ensure_column_exists(conn, "customers", "note", "TEXT")
        ensure_column_exists(conn, "contacts", "is_primary", "INTEGER NOT NULL DEFAULT 0")
        ensure_column_exists(conn, "opportunities", "quote_number", "TEXT")
        ensure_column_exists(conn, "opportunities", "status", "TEXT NOT NULL DEFAULT 'open'")
        ensure_column_exists(conn, "estimates", "travel_data", "TEXT")
        ensure_column_exists(conn, "estimates", "display_number", "TEXT NOT NULL DEFAULT '000000'")
        ensure_column_exists(conn, "letter_proposals", "neta_standard", "TEXT")
        ensure_column_exists(conn, "letter_proposals", "estimate_id", "INTEGER")
        ensure_column_exists(conn, "letter_proposals", "data", "TEXT")
        if get_user_version(conn) < SCHEMA_VERSION:
            set_user_version(conn, SCHEMA_VERSION)
        logging.info("[MIG] done user_version=%s", get_user_version(conn))
    except sqlite3.Error as e:
        logging.exception("DB migration failed: %s", e)
        raise RuntimeError(f"DB migration failed: {e}")


def register_error_handlers(app):
    from crm_estimator.errors import EstimatorError

    @app.errorhandler(EstimatorError)
    def estimator_error(e):
        if e.status_code >= 500:
            app.logger.error("[ERROR] %s: %s", type(e).__name__, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description, "type": e.name}), e.code

    # Flask has already logged the traceback by the time this runs
    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "type": "InternalServerError"}), 500


def create_app(config_overrides=None):
    template_dir = resource_path("templates")

    debug_mode = os.environ.get("FLASK_DEBUG", "0") == "1"
    logging.basicConfig(
        level=logging.DEBUG if debug_mode else logging.INFO,
        format="[%(asctime)s] %(levelname)s in %(module)s: %(message)s",
    )

    app = Flask(__name__, template_folder=template_dir)
    app.config.from_object(Config)
    app.json.sort_keys = False
    if config_overrides:
        app.config.update(config_overrides)
    app.logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    app.logger.info("[DB] Using database: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    if debug_mode:
        app.config["TEMPLATES_AUTO_RELOAD"] = True
        app.config["PROPAGATE_EXCEPTIONS"] = True

    db.init_app(app)
    register_error_handlers(app)

    with app.app_context():
        from crm_estimator import models  # noqa: F401  (registers tables)
        db.create_all()

    db_path = sqlite_path_from_uri(app.config["SQLALCHEMY_DATABASE_URI"])
    if db_path:
        conn = sqlite3.connect(db_path, timeout=30)
        safe_set_pragma(conn, "PRAGMA foreign_keys=ON")
        safe_set_pragma(conn, "PRAGMA journal_mode=WAL")
        try:
            apply_migrations(conn)
        finally:
            conn.close()

    # Blueprints
    from crm_estimator.routes.main import main_bp
    from crm_estimator.routes.customer import customer_bp
    from crm_estimator.routes.opportunity import opportunity_bp
    from crm_estimator.routes.estimate import estimate_bp
    from crm_estimator.routes.letter import letter_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(customer_bp)
    app.register_blueprint(opportunity_bp)
    app.register_blueprint(estimate_bp)
    app.register_blueprint(letter_bp)

    from crm_estimator.estimating.pricing import format_currency, format_number
    app.jinja_env.filters["currency"] = format_currency
    app.jinja_env.filters["number"] = format_number

    if debug_mode:
        for rule in app.url_map.iter_rules():
            app.logger.debug("%s %s -> %s", ",".join(sorted(rule.methods)), rule.rule, rule.endpoint)

    app.logger.info("[BOOT] create_app completed")
    return app
