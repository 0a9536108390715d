"""
jsondb command line entry point
Runs a single database action against a data directory and prints the
JSON response.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .api import STATUS_OK, DatabaseApi
from .config import JsonDBConfig
from .registry import DatabaseRegistry


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Set up logging configuration"""

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Diagnostics go to stderr so stdout stays valid JSON
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def json_object(text: str) -> Dict[str, Any]:
    """argparse type: a JSON object"""
    try:
        value = json.loads(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}")
    if not isinstance(value, dict):
        raise argparse.ArgumentTypeError("expected a JSON object")
    return value


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""

    parser = argparse.ArgumentParser(
        prog="jsondb",
        description="jsondb - query and update JSON document databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Count every document in ./data/users.json
  jsondb users count

  # Find adults, returning only their names
  jsondb users find --query '{"age": {"$gte": 18}}' --projection '{"name": 1}'

  # Insert into a database that does not exist yet
  jsondb --create-missing users insert --doc '{"name": "Ada"}'

  # Increment a counter on every matching document
  jsondb users update --query '{"active": true}' --update '{"$inc": {"visits": 1}}' --multi
        """,
    )

    # Configuration options
    parser.add_argument(
        "--config", "-c", type=str, help="Path to YAML configuration file"
    )

    parser.add_argument("--data-dir", type=str, help="Data directory path")

    parser.add_argument(
        "--create-missing",
        action="store_true",
        help="Create the database if its file does not exist",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-file", type=str, help="Log file path (logs to stderr if not specified)"
    )

    # Action
    parser.add_argument("db_name", help="Database name")

    parser.add_argument(
        "action",
        choices=["count", "find", "findOne", "insert", "remove", "update", "save"],
        help="Action to run",
    )

    parser.add_argument("--query", type=json_object, default={}, help="Query as JSON")
    parser.add_argument("--projection", type=json_object, default={}, help="Projection as JSON")
    parser.add_argument("--doc", type=json_object, help="Document to insert as JSON")
    parser.add_argument("--update", type=json_object, help="Update operators as JSON")

    parser.add_argument(
        "--multi", action="store_true", help="Allow remove/update of several documents"
    )

    parser.add_argument(
        "--skip-save", action="store_true", help="Do not write the database file"
    )

    return parser


def create_config_from_args(args: argparse.Namespace) -> JsonDBConfig:
    """Create JsonDBConfig from command line arguments"""

    # Start with config file if provided
    if args.config:
        config = JsonDBConfig.from_file(args.config)
    else:
        config = JsonDBConfig.from_env()

    # Override with command line arguments
    if args.data_dir:
        config.storage.data_dir = args.data_dir

    if args.create_missing:
        config.storage.create_missing = True

    if args.log_level:
        config.logging.level = args.log_level

    if args.log_file:
        config.logging.log_file = args.log_file

    return config


def build_request(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into an API request"""
    request: Dict[str, Any] = {
        "db_name": args.db_name,
        "action": args.action,
        "query": args.query,
        "projection": args.projection,
        "options": {"multi": args.multi, "skip_save": args.skip_save},
    }

    if args.doc is not None:
        request["doc"] = args.doc

    if args.update is not None:
        request["update"] = args.update

    return request


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""

    parser = create_argument_parser()
    args = parser.parse_args(argv)

    config = create_config_from_args(args)

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"jsondb: {error}", file=sys.stderr)
        return 2

    # Set up logging first
    setup_logging(config.logging.level, config.logging.log_file)

    logger = logging.getLogger(__name__)
    logger.debug(f"Configuration: {config}")

    with DatabaseRegistry.from_config(config) as registry:
        response = DatabaseApi(registry).call(build_request(args))

    print(json.dumps(response, ensure_ascii=False))

    return 0 if response["status"] == STATUS_OK else 1


def sync_main():
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    sync_main()
