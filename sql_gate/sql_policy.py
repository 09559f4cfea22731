# sql_gate/sql_policy.py
from __future__ import annotations

import re
from typing import FrozenSet, Tuple


# Leading keywords that signal a read-only statement.
READ_ONLY_KEYWORDS: FrozenSet[str] = frozenset({
    "SELECT",
    "SHOW",
    "EXPLAIN",
    "DESCRIBE",
    "DESC",
    "WITH",     # SELECT must follow the common-table expressions
    "VALUES",   # literal row constructor
    "TABLE",    # PostgreSQL shorthand for SELECT *
})

# Never allowed as a leading keyword. Used for documentation and tests only;
# anything outside READ_ONLY_KEYWORDS is rejected anyway.
DESTRUCTIVE_KEYWORDS: Tuple[str, ...] = (
    "DELETE", "UPDATE", "INSERT", "DROP", "REPLACE",
    "TRUNCATE", "ALTER", "CREATE", "RENAME",
)

# Messages are part of the client contract. Keep them verbatim.
EMPTY_QUERY_MESSAGE = "Please pass a valid query"
NOT_READ_ONLY_MESSAGE = (
    "Only read-only queries are allowed "
    "(SELECT, SHOW, EXPLAIN, DESCRIBE, DESC, WITH … SELECT)."
)
QUERY_FAILED_PREFIX = "Query failed: "

# Reason codes carried by ClassificationDecision
EMPTY_QUERY = "empty_query"
NOT_READ_ONLY = "not_read_only"

WITH_SELECT_RE = re.compile(r"with\s+.*select\b", re.IGNORECASE | re.DOTALL)
