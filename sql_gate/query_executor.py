# sql_gate/query_executor.py
from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


# ----------------------------
# Error taxonomy
# ----------------------------

class QueryExecutionError(Exception):
    code: str = "execution_error"

class UnknownConnection(QueryExecutionError):
    code = "unknown_connection"

    def __init__(self, name: str):
        super().__init__(f"Database connection [{name}] not configured.")
        self.name = name

class RowLimitExceeded(QueryExecutionError):
    code = "row_limit_exceeded"

class SQLiteExecutionError(QueryExecutionError):
    code = "sqlite_error"


# ----------------------------
# Result object
# ----------------------------

@dataclass(frozen=True)
class ExecutionResult:
    columns: Tuple[str, ...]
    rows: List[Dict[str, Any]]
    row_count: int
    execution_time_ms: int


# ----------------------------
# Executor
# ----------------------------

class QueryExecutor:
    """
    Runs a statement that already passed classify_sql (+ rewrite_sql).
    The connection itself is opened read-only, so a write that slips through
    still fails inside SQLite.
    """

    def __init__(
        self,
        db_path: str,
        *,
        max_rows: Optional[int] = None,
    ):
        self.db_path = db_path
        self.max_rows = max_rows

    def _connect_readonly(self) -> sqlite3.Connection:
        uri = f"file:{self.db_path}?mode=ro"
        return sqlite3.connect(uri, uri=True)

    def execute(self, sql: str) -> ExecutionResult:
        start = time.time()
        conn = None

        try:
            conn = self._connect_readonly()
            cur = conn.cursor()
            cur.execute(sql)

            columns = tuple([d[0] for d in cur.description]) if cur.description else ()

            rows: List[Dict[str, Any]] = []
            for row in cur:
                rows.append(dict(zip(columns, row)))
                # All or nothing: never hand back a truncated result.
                if self.max_rows is not None and len(rows) > self.max_rows:
                    raise RowLimitExceeded(
                        f"row_limit_exceeded: {len(rows)} > {self.max_rows}"
                    )

            exec_ms = int((time.time() - start) * 1000)

            return ExecutionResult(
                columns=columns,
                rows=rows,
                row_count=len(rows),
                execution_time_ms=exec_ms,
            )

        except QueryExecutionError:
            raise
        except sqlite3.Error as e:
            raise SQLiteExecutionError(str(e)) from e
        finally:
            if conn is not None:
                conn.close()
