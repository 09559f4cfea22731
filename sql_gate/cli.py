# sql_gate/cli.py
from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from sql_gate.config import ENV_LOG_LEVEL, ConfigError
from sql_gate.gate import QueryGate
from sql_gate.logger import setup_logger
from sql_gate.sql_validator import classify_sql


def _dry_run(gate: QueryGate, args: argparse.Namespace) -> int:
    query = args.sql.strip()
    decision = classify_sql(query)

    print("=== DRY RUN ===")
    if not decision.ok:
        print(f"REJECTED ({decision.reason}): {decision.message}")
        return 1

    try:
        prepared = gate.prepare(query, args.database, args.tables)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(f"CONNECTION: {prepared.connection}")
    print(f"PREFIX: {prepared.prefix!r}")
    print(f"PREFIXED_TABLES: {', '.join(prepared.applied) or '-'}")
    print("\n=== FINAL_SQL ===")
    print(prepared.sql)
    return 0


def _run_query(gate: QueryGate, args: argparse.Namespace) -> int:
    if args.dry_run:
        return _dry_run(gate, args)

    response = gate.handle(args.sql, database=args.database, tables=args.tables)
    if not response.ok:
        print(response.message, file=sys.stderr)
        return 1

    print(response.to_text())
    return 0


def _serve(args: argparse.Namespace) -> int:
    # Imported here so `query` works without the MCP stack loaded.
    from sql_gate.mcp_tool import create_server

    create_server().run(transport=args.transport)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sql-gate",
        description="Read-only SQL gate with table prefix rewriting",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="loguru level (default: env SQL_GATE_LOG_LEVEL or INFO).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    q = sub.add_parser("query", help="Classify, rewrite and run one SQL statement.")
    q.add_argument("sql", help="The SQL statement.")
    q.add_argument(
        "--database",
        default=None,
        help="Connection name. Defaults to the configured default connection.",
    )
    q.add_argument(
        "-t",
        "--table",
        dest="tables",
        action="append",
        default=[],
        help="Table name to prefix (repeatable, without the prefix).",
    )
    q.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the classification and final SQL without executing.",
    )

    s = sub.add_parser("serve", help="Run the MCP server exposing database_query.")
    s.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
    )
    return parser


def main(argv: Optional[List[str]] = None, *, load_env: bool = True) -> int:
    if load_env:
        load_dotenv()
    args = build_parser().parse_args(argv)

    setup_logger(args.log_level or os.environ.get(ENV_LOG_LEVEL) or "INFO")

    if args.command == "serve":
        return _serve(args)
    return _run_query(QueryGate(), args)


if __name__ == "__main__":
    raise SystemExit(main())
