"""Settings for the test run.

``SECRET_KEY`` has no default in production settings; the test run
provides a throwaway one and an in-memory SQLite database.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-only-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")

from config.settings import *  # noqa: E402,F401,F403
