"""
PostgreSQL presence verifier.

Builds COUNT queries with psycopg.sql so table and column names are quoted
identifiers and every value is a bound parameter.
"""

from collections.abc import Mapping, Sequence

import psycopg
from psycopg import sql

from fieldrules.core.errors import MalformedRuleError, PresenceVerifierError
from fieldrules.observability.logger import get_logger
from fieldrules.observability.metrics import (
    presence_query_duration_seconds,
    record_presence_query,
    track_duration,
)
from fieldrules.utils.validation import UnsafeInputError, sanitize_sql_identifier

from .base import PresenceVerifier
from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

NULL = "NULL"
NOT_NULL = "NOT_NULL"


class DatabasePresenceVerifier(PresenceVerifier):
    """
    Presence verifier backed by a DatabaseConnectionPool.

    Example:
        >>> pool = DatabaseConnectionPool()
        >>> pool.open()
        >>> validator.set_presence_verifier(DatabasePresenceVerifier(pool))
    """

    def __init__(self, pool: DatabaseConnectionPool, schema: str | None = None):
        """
        Args:
            pool: Open connection pool
            schema: Schema qualifying every table (search_path when None)
        """
        self.pool = pool
        self.schema = schema

    def get_count(
        self,
        table: str,
        column: str,
        value: str,
        exclude_id: str | None = None,
        id_column: str | None = None,
        extra: Mapping[str, str] | None = None,
    ) -> int:
        conditions = [sql.SQL("{} = %s").format(self._identifier(column, "column"))]
        params: list = [value]

        if exclude_id is not None:
            conditions.append(sql.SQL("{} <> %s").format(self._identifier(id_column or "id", "id_column")))
            params.append(exclude_id)

        return self._count(table, conditions, params, extra)

    def get_multi_count(
        self,
        table: str,
        column: str,
        values: Sequence[str],
        extra: Mapping[str, str] | None = None,
    ) -> int:
        if not values:
            return 0
        conditions = [sql.SQL("{} = ANY(%s)").format(self._identifier(column, "column"))]
        return self._count(table, conditions, [list(values)], extra)

    # =======================
    # QUERY BUILDING
    # =======================

    def _identifier(self, name: str, field_name: str) -> sql.Identifier:
        try:
            return sql.Identifier(sanitize_sql_identifier(name, field_name))
        except UnsafeInputError as e:
            raise MalformedRuleError("presence", str(e)) from e

    def _table(self, table: str) -> sql.Composable:
        if self.schema:
            return sql.SQL("{}.{}").format(
                self._identifier(self.schema, "schema"), self._identifier(table, "table")
            )
        return self._identifier(table, "table")

    def _extra_conditions(self, extra: Mapping[str, str] | None, params: list) -> list[sql.Composable]:
        conditions = []
        for column, expected in (extra or {}).items():
            identifier = self._identifier(column, "column")
            if expected == NULL:
                conditions.append(sql.SQL("{} IS NULL").format(identifier))
            elif expected == NOT_NULL:
                conditions.append(sql.SQL("{} IS NOT NULL").format(identifier))
            else:
                conditions.append(sql.SQL("{} = %s").format(identifier))
                params.append(expected)
        return conditions

    def build_count_query(self, table: str, conditions: list[sql.Composable], params: list,
                          extra: Mapping[str, str] | None = None) -> sql.Composed:
        """
        Compose the COUNT query for a table and its conditions.

        Extra condition parameters are appended to params in place.
        """
        where = conditions + self._extra_conditions(extra, params)
        return sql.SQL("SELECT COUNT(*) AS count FROM {} WHERE {}").format(
            self._table(table), sql.SQL(" AND ").join(where)
        )

    def _count(self, table: str, conditions: list[sql.Composable], params: list,
               extra: Mapping[str, str] | None) -> int:
        query = self.build_count_query(table, conditions, params, extra)

        try:
            with track_duration(presence_query_duration_seconds, table=table):
                with self.pool.get_cursor() as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
        except psycopg.DatabaseError as e:
            record_presence_query(table, False)
            logger.error(f"Presence count on '{table}' failed: {e}")
            raise PresenceVerifierError(f"Presence count on '{table}' failed: {e}") from e

        record_presence_query(table, True)
        count = int(row["count"]) if row else 0
        logger.debug(f"Presence count on '{table}': {count}")
        return count
