# Overview: Unauthenticated health and version endpoints.

import sys
import time

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from gesti.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"


def check_database_health() -> dict:
    """Round-trip a trivial query and report the latency."""
    started = time.perf_counter()
    try:
        db.session.execute(text("SELECT 1"))
        status = {"status": "healthy"}
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        status = {"status": "unhealthy", "error": "Database error"}
    status["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    return status


@system_bp.get("/health")
def health():
    """200 when the database answers, 503 otherwise."""
    database = check_database_health()
    http_status = 200 if database["status"] == "healthy" else 503
    return {
        "status": database["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database},
    }, http_status


@system_bp.get("/version")
def version():
    return {
        "api_version": API_VERSION,
        "environment": "development" if current_app.debug else "production",
        "python_version": sys.version.split()[0],
        "timezone": current_app.config.get("GESTI_TIMEZONE", "UTC"),
    }
