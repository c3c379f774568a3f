# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, cast

from dotenv import load_dotenv

from nodecache.app import (
    PersistenceBackend,
    build_cache,
    download_schema,
    fetch_query,
    ingest_file,
    summarize_cache,
)
from nodecache.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalized GraphQL response cache")
    parser.add_argument(
        "--schema",
        type=Path,
        help="Introspection result (JSON) used to resolve field types",
    )
    parser.add_argument(
        "--store",
        choices=("json", "database", "none"),
        default="json",
        help="Where the normalized store is persisted (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level name (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    query = subparsers.add_parser("query", help="Run a query through the cache")
    source = query.add_mutually_exclusive_group(required=True)
    source.add_argument("--query", type=str, help="Query document text")
    source.add_argument("--query-file", type=Path, help="File holding the query document")
    query.add_argument(
        "--variables",
        type=str,
        help="JSON object with the query variables",
    )
    query.add_argument(
        "--offline",
        action="store_true",
        help="Answer from the persisted cache without touching the network",
    )

    ingest = subparsers.add_parser("ingest", help="Normalize a saved response document")
    ingest.add_argument("path", type=Path, help="JSON file with a GraphQL response")

    subparsers.add_parser("show", help="Print entity counts per cached type")
    subparsers.add_parser("clear", help="Empty the cache and its persisted snapshot")

    schema = subparsers.add_parser("schema", help="Download the endpoint's introspection result")
    schema.add_argument("path", type=Path, help="Where to write the introspection JSON")

    return parser.parse_args(list(argv))


def _parse_variables(value: str | None) -> dict[str, object] | None:
    if value is None:
        return None
    try:
        variables = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid --variables JSON: {exc.msg}") from exc
    if not isinstance(variables, dict):
        raise ValueError("--variables must be a JSON object")
    return cast(dict[str, object], variables)


def _read_query(args: argparse.Namespace) -> str:
    if args.query is not None:
        return args.query
    try:
        return Path(args.query_file).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read query file {args.query_file}: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=parsed_args.log_level.upper())

    query_text: str | None = None
    variables: dict[str, object] | None = None
    try:
        if parsed_args.command == "query":
            query_text = _read_query(parsed_args)
            variables = _parse_variables(parsed_args.variables)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    backend = cast(PersistenceBackend, parsed_args.store)
    try:
        if parsed_args.command == "schema":
            count = download_schema(parsed_args.path)
            log.info("Introspection lists %d types", count)
            return

        cache = build_cache(schema_path=parsed_args.schema, backend=backend)
        if parsed_args.command == "query" and query_text is not None:
            data = fetch_query(query_text, variables, cache=cache, offline=parsed_args.offline)
            print(json.dumps({"data": data}, indent=2, default=str))
        elif parsed_args.command == "ingest":
            aliases = ingest_file(parsed_args.path, cache=cache)
            print(json.dumps(aliases, indent=2))
        elif parsed_args.command == "show":
            for type_name, count in summarize_cache(cache).items():
                print(f"{type_name}\t{count}")
        elif parsed_args.command == "clear":
            cache.clear()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
