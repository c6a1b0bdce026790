"""
Command line interface for validating JSON payloads against YAML rule sets.

Usage:
    fieldrules check --rules <rules.yaml> --data <payload.json> [options]
    fieldrules list-rules [--format json|text]

Exit codes:
    0  the payload passed
    1  the payload failed validation
    2  configuration error (bad rule file, unknown rule, missing message, ...)
    3  the presence verifier failed

A payload value of the form {"$file": "path/to/upload.png"} is read as an
uploaded file, so file rules such as mimes and image can be checked.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from psycopg import OperationalError

from fieldrules.core.errors import ConfigurationError, PresenceVerifierError
from fieldrules.core.models import UploadedFile, ValidationResult
from fieldrules.core.rules import RuleConfigLoader
from fieldrules.core.validators import default_registry
from fieldrules.observability.logger import get_logger, setup_logger
from fieldrules.observability.metrics import generate_metrics
from fieldrules.utils.validation import validate_file_path

logger = get_logger(__name__)

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_VERIFIER_ERROR = 3

FILE_MARKER = "$file"


def load_payload(path: str) -> dict[str, Any]:
    """
    Read a JSON object payload ("-" reads stdin).

    Raises:
        ConfigurationError: If the payload is not a JSON object
    """
    try:
        if path == "-":
            payload = json.load(sys.stdin)
        else:
            with open(validate_file_path(path, "data")) as f:
                payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ConfigurationError("Payload must be a JSON object")

    return {key: _read_value(value) for key, value in payload.items()}


def _read_value(value: Any) -> Any:
    if isinstance(value, dict) and set(value) == {FILE_MARKER}:
        return UploadedFile.from_path(value[FILE_MARKER])
    return value


def build_presence_verifier(args):
    """Open a connection pool from --db-* options and the DB_* environment."""
    from fieldrules.verifiers.connection import DatabaseConnectionPool
    from fieldrules.verifiers.database import DatabasePresenceVerifier

    pool = DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )
    try:
        pool.open()
    except OperationalError as e:
        raise PresenceVerifierError(f"Cannot connect to the presence database: {e}") from e
    return DatabasePresenceVerifier(pool, schema=args.db_schema)


def format_result(rule_set_name: str, result: ValidationResult, output_format: str) -> str:
    """Render a result for stdout."""
    if output_format == "json":
        return json.dumps(
            {
                "rule_set": rule_set_name,
                "passed": result.passed,
                "messages": result.messages,
                "failures": [failure.model_dump(mode="json") for failure in result.failures],
            },
            indent=2,
            ensure_ascii=False,
        )

    if result.passed:
        return f"{rule_set_name}: PASSED"

    lines = [f"{rule_set_name}: FAILED ({len(result.failures)} failure(s))"]
    for entry in result.messages:
        for attribute, message in entry.items():
            lines.append(f"  {attribute}: {message}")
    return "\n".join(lines)


def check_command(args) -> int:
    """
    Validate a payload against a rule set file.

    Args:
        args: Command line arguments

    Returns:
        Process exit code
    """
    if args.env_file:
        load_dotenv(args.env_file, override=False)

    verifier = None
    try:
        rule_set = RuleConfigLoader(validate_file_path(args.rules, "rules")).load()
        payload = load_payload(args.data)

        if args.with_database:
            verifier = build_presence_verifier(args)

        logger.info(f"Checking payload against rule set '{rule_set.name}'")
        result = rule_set.validate(payload, presence_verifier=verifier)

    except PresenceVerifierError as e:
        logger.error(f"Presence verifier failed: {e}")
        print(f"Presence verifier failed: {e}", file=sys.stderr)
        return EXIT_VERIFIER_ERROR
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        # ValueError covers unsafe paths and a missing database password
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    finally:
        if verifier is not None:
            verifier.pool.close()

    print(format_result(rule_set.name, result, args.format))

    if args.metrics_file:
        Path(args.metrics_file).write_bytes(generate_metrics())

    return EXIT_PASSED if result.passed else EXIT_FAILED


def list_rules_command(args) -> int:
    """Print every registered rule and the parameters it requires."""
    rules = default_registry().describe()
    if args.format == "json":
        print(json.dumps([{"rule": name, "min_parameters": arity} for name, arity in rules], indent=2))
    else:
        for name, arity in rules:
            print(f"{name:<24} {arity}")
    return EXIT_PASSED


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fieldrules",
        description="Validate JSON payloads against declarative rule sets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: LOG_LEVEL env var or WARNING)"
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default="json",
        help="Log record format (default: json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Validate a payload against a rule set"
    )
    check_parser.add_argument(
        "--rules",
        required=True,
        help="YAML rule set file"
    )
    check_parser.add_argument(
        "--data",
        required=True,
        help="JSON payload file, or - for stdin"
    )
    check_parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )
    check_parser.add_argument(
        "--env-file",
        help="Load environment variables (DB_* settings) from this file"
    )
    check_parser.add_argument(
        "--with-database",
        action="store_true",
        help="Enable unique/exists rules through a PostgreSQL presence verifier"
    )
    check_parser.add_argument("--db-host", help="Database host (default: DB_HOST)")
    check_parser.add_argument("--db-port", type=int, help="Database port (default: DB_PORT)")
    check_parser.add_argument("--db-name", help="Database name (default: DB_NAME)")
    check_parser.add_argument("--db-user", help="Database user (default: DB_USER)")
    check_parser.add_argument("--db-password", help="Database password (default: DB_PASSWORD)")
    check_parser.add_argument("--db-schema", help="Schema qualifying table names")
    check_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics in text format to this file after the check"
    )

    # list-rules command
    list_parser = subparsers.add_parser(
        "list-rules",
        help="List the built-in rules"
    )
    list_parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the fieldrules CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logger("fieldrules", level=args.log_level or os.getenv("LOG_LEVEL", "WARNING"), format_type=args.log_format)

    commands = {
        "check": check_command,
        "list-rules": list_rules_command,
    }

    if args.command not in commands:
        parser.print_help()
        return EXIT_CONFIG_ERROR

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
