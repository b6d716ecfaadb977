from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from crm_estimator import db


main_bp = Blueprint('main', __name__)


@main_bp.route("/")
def index():
    return jsonify({
        "name": "crm-estimator",
        "company": current_app.config["LETTER_COMPANY_NAME"],
    })


@main_bp.route("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        current_app.logger.error("[HEALTH] database check failed: %s", e)
        database = "error"
    status = 200 if database == "ok" else 503
    return jsonify({"status": "ok" if status == 200 else "degraded", "database": database}), status
