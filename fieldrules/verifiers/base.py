"""
Presence verifier contract used by the unique and exists rules.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence


class PresenceVerifier(ABC):
    """
    Counts records matching a value in an external store.

    Implementations answer count queries only and must not modify the store.
    Extra conditions map a column to a required value; the values "NULL" and
    "NOT_NULL" ask for IS NULL / IS NOT NULL.
    """

    @abstractmethod
    def get_count(
        self,
        table: str,
        column: str,
        value: str,
        exclude_id: str | None = None,
        id_column: str | None = None,
        extra: Mapping[str, str] | None = None,
    ) -> int:
        """
        Count records whose column equals value.

        Args:
            table: Table (collection) name
            column: Column to match
            value: Value to match
            exclude_id: Id of a record to leave out of the count
            id_column: Column holding exclude_id ("id" by default)
            extra: Additional column conditions

        Returns:
            Number of matching records
        """

    @abstractmethod
    def get_multi_count(
        self,
        table: str,
        column: str,
        values: Sequence[str],
        extra: Mapping[str, str] | None = None,
    ) -> int:
        """
        Count records whose column equals any of values.

        Args:
            table: Table (collection) name
            column: Column to match
            values: Candidate values
            extra: Additional column conditions

        Returns:
            Number of matching records
        """
