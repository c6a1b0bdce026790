"""
Input checks for values that end up in SQL text.

Table and column names in unique/exists rules come from rule configuration
and are interpolated as identifiers, so they are checked before any query is
built. Values are always bound parameters and need no checking here.
"""

import re


class UnsafeInputError(ValueError):
    """Raised when an identifier or path fails its safety check."""
    pass


_IDENTIFIER = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')


def sanitize_sql_identifier(identifier: str, field_name: str = "identifier") -> str:
    """
    Sanitize an SQL identifier (table name, column name, etc.).

    Reserved words are allowed ("user" is a common table name) because the
    verifier always quotes identifiers.

    Args:
        identifier: The identifier to sanitize
        field_name: Name of the field (for error messages)

    Returns:
        The validated identifier

    Raises:
        UnsafeInputError: If validation fails

    Examples:
        >>> sanitize_sql_identifier("users")
        'users'
        >>> sanitize_sql_identifier("users; DROP TABLE users;")  # doctest: +SKIP
        UnsafeInputError: identifier contains invalid characters
    """
    if not identifier or not isinstance(identifier, str):
        raise UnsafeInputError(f"{field_name} must be a non-empty string")

    identifier = identifier.strip()

    if not _IDENTIFIER.match(identifier):
        raise UnsafeInputError(
            f"{field_name} '{identifier}' contains invalid characters. "
            "SQL identifiers must start with a letter or underscore and contain only "
            "alphanumeric characters and underscores."
        )

    if len(identifier) > 63:  # PostgreSQL limit
        raise UnsafeInputError(f"{field_name} exceeds PostgreSQL maximum length of 63 characters")

    return identifier


def validate_file_path(file_path: str, field_name: str = "file_path") -> str:
    """
    Validate a file path given on the command line.

    Args:
        file_path: The file path to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated file path (stripped of whitespace)

    Raises:
        UnsafeInputError: If validation fails
    """
    if not file_path or not isinstance(file_path, str):
        raise UnsafeInputError(f"{field_name} must be a non-empty string")

    file_path = file_path.strip()

    if not file_path:
        raise UnsafeInputError(f"{field_name} cannot be empty or whitespace-only")

    if "\x00" in file_path:
        raise UnsafeInputError(f"{field_name} contains null bytes")

    if len(file_path) > 4096:  # Linux PATH_MAX
        raise UnsafeInputError(f"{field_name} exceeds maximum length of 4096 characters")

    return file_path
