# sql_gate/connections.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sql_gate.config import GateSettings, load_settings
from sql_gate.query_executor import QueryExecutor, UnknownConnection


@dataclass(frozen=True)
class ResolvedConnection:
    name: str
    prefix: str = ""
    database: Optional[str] = None   # None when the name is not configured


class ConnectionRegistry:
    """
    Maps a connection name to its table prefix and an executor.

    resolve() loads the settings once; the result is used for the rest of
    the request, so prefix and database path always come from the same
    version of the config. The gate only needs resolve() and execute(),
    so tests can pass any object that provides them.
    """

    def __init__(
        self,
        settings_loader: Callable[[], GateSettings] = load_settings,
        *,
        max_rows: Optional[int] = None,
    ):
        self.settings_loader = settings_loader
        self.max_rows = max_rows

    def resolve(self, name: Optional[str] = None) -> ResolvedConnection:
        settings = self.settings_loader()
        name = name or settings.default_connection
        conn = settings.connection(name)
        if conn is None:
            return ResolvedConnection(name=name)
        return ResolvedConnection(name=name, prefix=conn.prefix, database=conn.database)

    def execute(self, connection: ResolvedConnection, sql: str) -> List[Dict[str, Any]]:
        if connection.database is None:
            raise UnknownConnection(connection.name)
        return QueryExecutor(connection.database, max_rows=self.max_rows).execute(sql).rows
