"""Pytest fixtures for the catalog proxy tests."""

import os

# Must be set before the package creates its engine
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy.orm import sessionmaker

from storefront_catalog.models.database import build_engine, create_tables, drop_tables
from storefront_catalog.services.credential_store import CredentialStore
from storefront_catalog.services.product_cache import ProductCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database per test."""
    engine = build_engine("sqlite://")
    create_tables(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    drop_tables(bind=engine)
    engine.dispose()


@pytest.fixture
def credential_store(session_factory):
    return CredentialStore(session_factory=session_factory)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def product_cache(clock):
    return ProductCache(ttl_seconds=600, clock=clock)
