"""Pytest configuration and fixtures."""

import os
from unittest.mock import patch
from uuid import uuid4

import pytest

# Loggers read settings at import time, so the env must exist before collection
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("IDEA_ENGINE_ENV", "test")

from tests.fakes.fake_supabase import FakeSupabase  # noqa: E402

DB_MODULES = [
    "idea_engine.db.activities",
    "idea_engine.db.comparisons",
    "idea_engine.db.criteria",
    "idea_engine.db.ideas",
    "idea_engine.db.scores",
]


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["IDEA_ENGINE_ENV"] = "test"


@pytest.fixture
def fake_db():
    """In-memory Supabase patched into every db module."""
    client = FakeSupabase()
    patchers = [patch(f"{module}.get_supabase", return_value=client) for module in DB_MODULES]
    for p in patchers:
        p.start()
    try:
        yield client
    finally:
        for p in patchers:
            p.stop()


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def other_user_id():
    return uuid4()
