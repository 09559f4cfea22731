# sql_gate/sql_rewriter.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple

from loguru import logger


@dataclass(frozen=True)
class RewriteResult:
    sql: str
    applied: Tuple[str, ...]


# ----------------------------
# Literal scanner
# ----------------------------

def split_string_literals(sql: str) -> List[Tuple[bool, str]]:
    """
    Partition `sql` into (is_literal, text) segments, in order.

    A literal is delimited by single quotes and may contain backslash escapes,
    so 'O\\'Reilly' is one literal. The SQL-standard doubled quote ('O''Reilly')
    comes out as two adjacent literals, which is equivalent for our purposes.
    An unterminated literal runs to the end of the input.

    Joining the texts always gives back `sql` unchanged.
    """
    segments: List[Tuple[bool, str]] = []
    n = len(sql)
    start = 0
    i = 0
    in_literal = False

    while i < n:
        ch = sql[i]
        if not in_literal:
            if ch == "'":
                if i > start:
                    segments.append((False, sql[start:i]))
                start = i
                in_literal = True
            i += 1
        elif ch == "\\":
            # escaped character, whatever it is
            i += 2
        elif ch == "'":
            i += 1
            segments.append((True, sql[start:i]))
            start = i
            in_literal = False
        else:
            i += 1

    if start < n:
        segments.append((in_literal, sql[start:]))
    return segments


# ----------------------------
# Table prefixing
# ----------------------------

def _table_pattern(table: str) -> Pattern[str]:
    # `name` | "name" | name not touching another identifier character
    name = re.escape(table)
    return re.compile(rf"(?P<quote>[`\"]){name}(?P=quote)|(?<!\w){name}(?!\w)")


def _prefix_segment(text: str, pattern: Pattern[str], prefixed: str) -> str:
    def _sub(m: re.Match) -> str:
        quote = m.group("quote") or ""
        return f"{quote}{prefixed}{quote}"

    return pattern.sub(_sub, text)


def add_table_prefix(sql: str, table: str, prefix: str) -> str:
    """Prefix one table name everywhere outside string literals."""
    pattern = _table_pattern(table)
    prefixed = f"{prefix}{table}"
    return "".join(
        text if is_literal else _prefix_segment(text, pattern, prefixed)
        for is_literal, text in split_string_literals(sql)
    )


def rewrite_sql(
    sql: str,
    tables: Optional[Sequence[str]],
    prefix: Optional[str],
) -> RewriteResult:
    if not tables or not prefix:
        return RewriteResult(sql=sql, applied=())

    applied = []
    for table in tables:
        if not table:
            continue
        # Already prefixed: never double-prefix.
        if table.startswith(prefix):
            continue

        sql = add_table_prefix(sql, table, prefix)
        applied.append(table)

    if applied:
        logger.debug(f"Prefixed tables {applied} with {prefix!r}")
    return RewriteResult(sql=sql, applied=tuple(applied))
