# backend/gesti/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/gesti.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///gesti.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Business day boundary for "today" (debts, dashboard)
    GESTI_TIMEZONE = os.environ.get("GESTI_TIMEZONE", "America/Bogota")

    # Bearer session lifetime
    SESSION_HOURS = int(os.environ.get("SESSION_HOURS", "24"))

    # Dev front-end origins allowed by the CORS hook
    CORS_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:4173",
        "http://127.0.0.1:4173",
    }


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    GESTI_TIMEZONE = "UTC"
