"""
Integration tests for the PostgreSQL presence verifier.

Requires Docker (testcontainers).
"""

import psycopg
import pytest

from fieldrules import validate
from fieldrules.core.errors import MalformedRuleError
from fieldrules.verifiers.connection import DatabaseConnectionPool
from fieldrules.verifiers.database import DatabasePresenceVerifier

pytestmark = pytest.mark.integration

MESSAGES = {"unique": "The :attribute has already been taken", "exists": "The selected :attribute is invalid"}


@pytest.fixture(scope="module")
def seeded_db(db_settings):
    """Create and fill the users table"""
    conninfo = (
        f"host={db_settings['host']} port={db_settings['port']} dbname={db_settings['database']} "
        f"user={db_settings['user']} password={db_settings['password']}"
    )
    with psycopg.connect(conninfo) as conn:
        with conn.cursor() as cur:
            cur.execute("DROP TABLE IF EXISTS users")
            cur.execute(
                "CREATE TABLE users (id SERIAL PRIMARY KEY, email TEXT NOT NULL, "
                "account_id INTEGER, deleted_at TIMESTAMP)"
            )
            cur.execute(
                "INSERT INTO users (email, account_id, deleted_at) VALUES "
                "('taken@example.com', 10, NULL), "
                "('other@example.com', 20, '2024-01-01'), "
                "('third@example.com', 10, NULL)"
            )
        conn.commit()
    return db_settings


@pytest.fixture
def verifier(seeded_db):
    with DatabaseConnectionPool(**seeded_db) as pool:
        yield DatabasePresenceVerifier(pool, schema="public")


class TestDatabasePresenceVerifier:
    """Tests against a real PostgreSQL"""

    def test_pool_opens(self, seeded_db):
        pool = DatabaseConnectionPool(**seeded_db)
        pool.open()
        try:
            assert pool.is_open is True
            with pool.get_cursor() as cur:
                cur.execute("SELECT 1 AS one")
                assert cur.fetchone() == {"one": 1}
        finally:
            pool.close()
        assert pool.is_open is False

    def test_connections_are_read_only(self, verifier):
        with pytest.raises(psycopg.errors.ReadOnlySqlTransaction):
            with verifier.pool.get_cursor() as cur:
                cur.execute("DELETE FROM users")

    def test_get_count(self, verifier):
        assert verifier.get_count("users", "email", "taken@example.com") == 1
        assert verifier.get_count("users", "email", "taken@example.com", "1", "id") == 0
        assert verifier.get_count("users", "account_id", "10", extra={"deleted_at": "NULL"}) == 2
        assert verifier.get_count("users", "account_id", "20", extra={"deleted_at": "NOT_NULL"}) == 1

    def test_get_multi_count(self, verifier):
        assert verifier.get_multi_count("users", "email", ["taken@example.com", "third@example.com", "x"]) == 2

    def test_unique_rule(self, verifier):
        assert validate({"email": "new@b.com"}, {"email": "unique:users"}, MESSAGES,
                        presence_verifier=verifier).outcome() is True
        assert validate({"email": "taken@example.com"}, {"email": "unique:users,email"}, MESSAGES,
                        presence_verifier=verifier).outcome() == [{"email": "The email has already been taken"}]
        assert validate({"email": "taken@example.com"}, {"email": "unique:users,email,1,id"}, MESSAGES,
                        presence_verifier=verifier).outcome() is True

    def test_exists_rule(self, verifier):
        assert validate({"account": "10"}, {"account": "exists:users,account_id,deleted_at,NULL"}, MESSAGES,
                        presence_verifier=verifier).outcome() is True
        assert validate({"emails": ["taken@example.com", "missing@b.com"]}, {"emails": "exists:users,email"},
                        MESSAGES, presence_verifier=verifier).outcome() == [{"emails": "The selected emails is invalid"}]

    def test_unsafe_table_rejected(self, verifier):
        with pytest.raises(MalformedRuleError):
            validate({"email": "a@b.com"}, {"email": "unique:users--"}, MESSAGES, presence_verifier=verifier)
