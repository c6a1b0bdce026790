"""
Pytest configuration and fixtures for fieldrules tests

This module provides shared fixtures for unit and integration tests.
"""
import os
from collections.abc import Mapping, Sequence
from typing import Generator

import pytest

from fieldrules.verifiers.base import PresenceVerifier


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )


# =======================
# PRESENCE VERIFIER FIXTURES
# =======================

class InMemoryPresenceVerifier(PresenceVerifier):
    """Presence verifier over a dict of table name -> list of row dicts."""

    def __init__(self, tables: dict[str, list[dict]]):
        self.tables = tables
        self.calls: list[tuple] = []

    def _matches(self, row: dict, extra: Mapping[str, str] | None) -> bool:
        for column, expected in (extra or {}).items():
            if expected == "NULL":
                if row.get(column) is not None:
                    return False
            elif expected == "NOT_NULL":
                if row.get(column) is None:
                    return False
            elif str(row.get(column)) != expected:
                return False
        return True

    def get_count(self, table, column, value, exclude_id=None, id_column=None, extra=None) -> int:
        self.calls.append(("get_count", table, column, value, exclude_id, id_column, dict(extra or {})))
        return sum(
            1
            for row in self.tables.get(table, [])
            if str(row.get(column)) == value
            and (exclude_id is None or str(row.get(id_column or "id")) != exclude_id)
            and self._matches(row, extra)
        )

    def get_multi_count(self, table, column, values: Sequence[str], extra=None) -> int:
        self.calls.append(("get_multi_count", table, column, list(values), dict(extra or {})))
        return sum(
            1
            for row in self.tables.get(table, [])
            if str(row.get(column)) in values and self._matches(row, extra)
        )


@pytest.fixture
def users_verifier() -> InMemoryPresenceVerifier:
    """Verifier holding a small users table"""
    return InMemoryPresenceVerifier({
        "users": [
            {"id": 1, "email": "taken@example.com", "account_id": 10, "deleted_at": None},
            {"id": 2, "email": "other@example.com", "account_id": 20, "deleted_at": "2024-01-01"},
            {"id": 3, "email": "third@example.com", "account_id": 10, "deleted_at": None},
        ]
    })


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator:
    """
    Start PostgreSQL container for integration tests

    Skips when testcontainers or Docker is unavailable.

    Yields:
        PostgresContainer instance
    """
    postgres_module = pytest.importorskip("testcontainers.postgres")

    try:
        container = postgres_module.PostgresContainer(
            image="postgres:16.2-alpine",
            username="test_fieldrules",
            password="test_password",
            dbname="test_fieldrules",
        )
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def db_settings(postgres_container) -> dict:
    """Connection settings for DatabaseConnectionPool"""
    return {
        "host": postgres_container.get_container_host_ip(),
        "port": int(postgres_container.get_exposed_port(5432)),
        "database": "test_fieldrules",
        "user": "test_fieldrules",
        "password": "test_password",
    }


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture
def write_file(tmp_path):
    """
    Write a text file under tmp_path

    Returns:
        Function (name, content) -> path
    """
    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content)
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def clean_database_env(monkeypatch):
    """Keep developer DB_* settings from leaking into tests"""
    for key in ("DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD"):
        if key in os.environ:
            monkeypatch.delenv(key)
