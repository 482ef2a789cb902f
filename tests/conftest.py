"""Test environment: in-memory SQLite, fast bcrypt, fixed signing secret. Set before clima is imported."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "clima-test-secret-0123456789abcdef0123")
os.environ.setdefault("JWT_EXPIRE_SECONDS", "3600")
os.environ.setdefault("AUTH_STRICT_BEARER", "false")
