# core/config.py
# -*- coding: utf-8 -*-

import os
from pathlib import Path

from dotenv import load_dotenv

# load .env first, everything below reads from the environment
load_dotenv()

# --------------------------------
# Paths / log directory
# --------------------------------

# project root
BASE_DIR = Path(__file__).resolve().parent.parent

# JSONL audit logs end up here
LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "data" / "logs")))
LOG_DIR.mkdir(parents=True, exist_ok=True)

# --------------------------------
# Database
# --------------------------------

# 1) DATABASE_URL wins (e.g. postgresql+psycopg2://... for a hosted Postgres)
# 2) DB_HOST/DB_USER/DB_PASSWORD/DB_NAME all set -> MySQL via PyMySQL
# 3) otherwise a local SQLite file
DATABASE_URL = os.getenv("DATABASE_URL")

DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")

SQLITE_PATH = os.path.abspath(os.getenv("SQLITE_PATH", "./campus_portal.db"))

# True prints every SQL statement (debugging only)
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# --------------------------------
# HTTP boundary
# --------------------------------

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

# comments longer than this are rejected before they reach the service
COMMENT_MAX_LENGTH = int(os.getenv("COMMENT_MAX_LENGTH", "500"))

# decoded size ceiling for one image payload (10MB)
IMAGE_MAX_BYTES = int(os.getenv("IMAGE_MAX_BYTES", str(10 * 1024 * 1024)))
IMAGE_ALLOWED_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")

# --------------------------------
# Admin gate (single static credential)
# --------------------------------

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "Campuz")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Campuz@001")

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

# --------------------------------
# Client mirror
# --------------------------------

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api")
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "30"))
MIRROR_CACHE_PATH = Path(
    os.getenv("MIRROR_CACHE_PATH", str(BASE_DIR / "data" / "mirror_cache.json"))
)
LOCAL_STORE_PATH = Path(
    os.getenv("LOCAL_STORE_PATH", str(BASE_DIR / "data" / "local_store.json"))
)
