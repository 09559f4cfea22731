# sql_gate/sql_validator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from sql_gate.sql_policy import (
    READ_ONLY_KEYWORDS,
    EMPTY_QUERY,
    EMPTY_QUERY_MESSAGE,
    NOT_READ_ONLY,
    NOT_READ_ONLY_MESSAGE,
    WITH_SELECT_RE,
)


@dataclass(frozen=True)
class ClassificationDecision:
    ok: bool
    reason: Optional[str] = None    # None | "empty_query" | "not_read_only"
    message: Optional[str] = None

    @classmethod
    def accepted(cls) -> "ClassificationDecision":
        return cls(ok=True)

    @classmethod
    def rejected(cls, reason: str, message: str) -> "ClassificationDecision":
        return cls(ok=False, reason=reason, message=message)


def _is_line_comment(sql: str, i: int) -> bool:
    if sql[i] == "#":
        return True
    # MySQL only treats "--" as a comment when whitespace (or the end) follows.
    return sql.startswith("--", i) and (i + 2 == len(sql) or sql[i + 2].isspace())


def strip_leading_comments(sql: str) -> str:
    """
    Drop whitespace and comments that precede the first keyword.
    Handles `-- ...`, `# ...` and `/* ... */`. An unterminated comment eats the rest.

    `/*! ... */` is not a comment to MySQL (the body is executed), so it stops
    the scan and becomes part of the first token.
    """
    i = 0
    n = len(sql)
    while i < n:
        if sql[i].isspace():
            i += 1
        elif _is_line_comment(sql, i):
            newline = sql.find("\n", i)
            if newline == -1:
                return ""
            i = newline + 1
        elif sql.startswith("/*", i) and not sql.startswith("/*!", i):
            end = sql.find("*/", i + 2)
            if end == -1:
                return ""
            i = end + 2
        else:
            break
    return sql[i:]


def first_keyword(sql: str) -> str:
    # Whitespace-delimited, so "SELECT*" is one token and is not allowed.
    body = strip_leading_comments(sql or "")
    parts = body.split(maxsplit=1)
    return parts[0].upper() if parts else ""


def classify_sql(raw_sql: Optional[str]) -> ClassificationDecision:
    sql = (raw_sql or "").strip()
    keyword = first_keyword(sql)

    if not keyword:
        return ClassificationDecision.rejected(EMPTY_QUERY, EMPTY_QUERY_MESSAGE)

    is_read_only = keyword in READ_ONLY_KEYWORDS

    # WITH ... must eventually SELECT, otherwise it is a data-modifying CTE.
    if keyword == "WITH" and not WITH_SELECT_RE.search(strip_leading_comments(sql)):
        is_read_only = False

    if not is_read_only:
        logger.info(f"Rejected non read-only statement starting with {keyword[:32]!r}")
        return ClassificationDecision.rejected(NOT_READ_ONLY, NOT_READ_ONLY_MESSAGE)

    return ClassificationDecision.accepted()
