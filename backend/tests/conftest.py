"""Root conftest — shared test configuration."""

import os

# Keep tests off any real database and away from slow password hashing
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")
os.environ.setdefault("LOG_FORMAT", "text")
