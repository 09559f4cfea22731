import sqlite3

import pytest

from sql_gate.connections import ResolvedConnection


@pytest.fixture(scope="session")
def sqlite_db_path(tmp_path_factory):
    """
    Small SQLite file whose tables carry the `arpg_` prefix,
    plus one unprefixed `users` table so we can tell the two apart.
    """
    path = tmp_path_factory.mktemp("db") / "sample.sqlite"
    conn = sqlite3.connect(path)
    try:
        conn.executescript(
            """
            CREATE TABLE arpg_users (id INTEGER PRIMARY KEY, name TEXT, active INTEGER);
            CREATE TABLE arpg_posts (id INTEGER PRIMARY KEY, user_id INTEGER, title TEXT);
            CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT);

            INSERT INTO arpg_users VALUES (1, 'Ada', 1), (2, 'O''Reilly', 0), (3, 'Linus', 1);
            INSERT INTO arpg_posts VALUES (1, 1, 'users'), (2, 1, 'Hello'), (3, 3, 'Kernel');
            INSERT INTO users VALUES (99, 'unprefixed');
            """
        )
        conn.commit()
    finally:
        conn.close()
    return str(path)


class FakeConnections:
    """In-memory stand-in for ConnectionRegistry."""

    def __init__(self, prefixes=None, rows=None, error=None, default="mysql"):
        self.prefixes = prefixes or {}
        self.rows = rows if rows is not None else []
        self.error = error
        self.default = default
        self.executed = []

    def resolve(self, name=None):
        name = name or self.default
        return ResolvedConnection(name=name, prefix=self.prefixes.get(name, ""), database=":fake:")

    def execute(self, connection, sql):
        self.executed.append((connection.name, sql))
        if self.error is not None:
            raise self.error
        return self.rows


@pytest.fixture
def fake_connections():
    return FakeConnections(prefixes={"mysql": "arpg_"})
