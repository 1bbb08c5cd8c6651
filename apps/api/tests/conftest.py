import os

# Settings are read at import time; keep the app off Postgres and out of startup seeding.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_DB_SCHEMA", "false")
os.environ.setdefault("SEED_DEFAULT_PACKAGES", "false")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import pytest

from main import app
from routers import rate_limit


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous
