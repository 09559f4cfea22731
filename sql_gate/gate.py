# sql_gate/gate.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from sql_gate.connections import ConnectionRegistry, ResolvedConnection
from sql_gate.sql_policy import QUERY_FAILED_PREFIX
from sql_gate.sql_rewriter import rewrite_sql
from sql_gate.sql_validator import classify_sql


@dataclass(frozen=True)
class GateResponse:
    ok: bool
    rows: Optional[List[Dict[str, Any]]] = None
    message: Optional[str] = None
    sql: Optional[str] = None   # final SQL sent to the connection, if any

    @classmethod
    def success(cls, rows: List[Dict[str, Any]], sql: str) -> "GateResponse":
        return cls(ok=True, rows=rows, sql=sql)

    @classmethod
    def error(cls, message: str, sql: Optional[str] = None) -> "GateResponse":
        return cls(ok=False, message=message, sql=sql)

    def to_text(self) -> str:
        if not self.ok:
            return self.message or ""
        # bytes, Decimal, dates etc. go out as their str()
        return json.dumps(self.rows or [], default=str, ensure_ascii=False)


@dataclass(frozen=True)
class PreparedQuery:
    target: ResolvedConnection
    sql: str
    applied: Tuple[str, ...]

    @property
    def connection(self) -> str:
        return self.target.name

    @property
    def prefix(self) -> str:
        return self.target.prefix


class QueryGate:
    """
    classify -> (prefix tables) -> execute, for a single request.

    Rejections come back as error responses, not exceptions. Anything raised
    once the query is admitted becomes "Query failed: <message>".
    """

    def __init__(self, connections: Optional[ConnectionRegistry] = None):
        self.connections = connections or ConnectionRegistry()

    def prepare(
        self,
        query: str,
        database: Optional[str] = None,
        tables: Optional[Sequence[str]] = None,
    ) -> PreparedQuery:
        # One config lookup per request, never cached across requests.
        target = self.connections.resolve(database)
        rewritten = rewrite_sql(query, list(tables or []), target.prefix)
        return PreparedQuery(target=target, sql=rewritten.sql, applied=rewritten.applied)

    def handle(
        self,
        query: Optional[str],
        database: Optional[str] = None,
        tables: Optional[Sequence[str]] = None,
    ) -> GateResponse:
        query = (query or "").strip()

        decision = classify_sql(query)
        if not decision.ok:
            return GateResponse.error(decision.message or "")

        prepared = None
        try:
            prepared = self.prepare(query, database, tables)
            rows = self.connections.execute(prepared.target, prepared.sql)
        except Exception as e:
            target = prepared.connection if prepared else database
            logger.warning(f"Query failed on connection {target!r}: {e}")
            return GateResponse.error(
                f"{QUERY_FAILED_PREFIX}{e}",
                sql=prepared.sql if prepared else None,
            )

        return GateResponse.success(list(rows), sql=prepared.sql)
