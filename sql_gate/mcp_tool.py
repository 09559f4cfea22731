# sql_gate/mcp_tool.py
"""MCP tool: database_query - Execute a read-only SQL query."""
from __future__ import annotations

from typing import Annotated, Callable, List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from loguru import logger
from pydantic import Field

from sql_gate.gate import GateResponse, QueryGate

SERVER_NAME = "sql-gate"
TOOL_NAME = "database_query"
TOOL_DESCRIPTION = "Execute a read-only SQL query against the configured database."


def render_response(response: GateResponse) -> str:
    """Turn a gate response into tool output; errors become ToolError."""
    if not response.ok:
        raise ToolError(response.message or "")
    return response.to_text()


def make_handler(gate: QueryGate) -> Callable[..., str]:
    def handler(
        query: Annotated[
            str,
            Field(
                description=(
                    "The SQL query to execute. Only read-only queries are allowed "
                    "(i.e. SELECT, SHOW, EXPLAIN, DESCRIBE)."
                )
            ),
        ],
        database: Annotated[
            Optional[str],
            Field(
                description=(
                    "Optional database connection name to use. "
                    "Defaults to the configured default connection."
                )
            ),
        ] = None,
        tables: Annotated[
            Optional[List[str]],
            Field(
                description=(
                    "Table names in the query that should be prefixed, given without "
                    "the prefix (case-sensitive). Only used when the connection has "
                    "a table prefix configured."
                )
            ),
        ] = None,
    ) -> str:
        """Execute a read-only SQL query.

        Returns:
            JSON array of rows, each an object mapping column name to value.
        """
        return render_response(gate.handle(query, database=database, tables=tables))

    return handler


def register(mcp: FastMCP, gate: QueryGate) -> None:
    mcp.tool(
        name=TOOL_NAME,
        description=TOOL_DESCRIPTION,
        annotations={"readOnlyHint": True, "destructiveHint": False},
    )(make_handler(gate))
    logger.debug(f"Registered MCP tool {TOOL_NAME}")


def create_server(gate: Optional[QueryGate] = None) -> FastMCP:
    mcp = FastMCP(SERVER_NAME)
    register(mcp, gate or QueryGate())
    return mcp
