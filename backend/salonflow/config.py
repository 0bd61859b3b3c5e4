# backend/salonflow/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/salonflow.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///salonflow.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Calendar days (daily reports, "today" stats) are cut in this zone
    SALON_TIMEZONE = os.environ.get("SALON_TIMEZONE", "UTC")

    # Display prefix for formatted money, amounts themselves are plain units
    CURRENCY_CODE = os.environ.get("CURRENCY_CODE", "LKR")

    # Barber accounts get <username>@<domain> when no email is supplied
    ACCOUNT_EMAIL_DOMAIN = os.environ.get("ACCOUNT_EMAIL_DOMAIN", "salonflow.local")

    # bcrypt cost factor; tests lower it to keep hashing fast
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    READ_RETRY_ATTEMPTS = int(os.environ.get("READ_RETRY_ATTEMPTS", "3"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if origin.strip()
    ]
