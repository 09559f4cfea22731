# sql_gate/config.py
"""
Process-wide connection configuration.

Read from environment variables (and an optional JSON file) every time
load_settings() is called; nothing here is cached, so edits to the
environment or the file are picked up by the next request.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


DEFAULT_CONNECTION_NAME = "default"

ENV_DEFAULT_CONNECTION = "SQL_GATE_DEFAULT_CONNECTION"
ENV_CONNECTIONS = "SQL_GATE_CONNECTIONS"
ENV_CONFIG_FILE = "SQL_GATE_CONFIG_FILE"
ENV_DATABASE = "SQL_GATE_DATABASE"
ENV_PREFIX = "SQL_GATE_PREFIX"
ENV_LOG_LEVEL = "SQL_GATE_LOG_LEVEL"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ConnectionConfig:
    name: str
    database: str
    prefix: str = ""


@dataclass(frozen=True)
class GateSettings:
    default_connection: str = DEFAULT_CONNECTION_NAME
    connections: Dict[str, ConnectionConfig] = field(default_factory=dict)

    def connection(self, name: str) -> Optional[ConnectionConfig]:
        return self.connections.get(name)

    def prefix_for(self, name: str) -> str:
        conn = self.connections.get(name)
        return conn.prefix if conn else ""


def _parse_connections(raw: Any, source: str) -> Dict[str, ConnectionConfig]:
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: connections must be a JSON object")

    out: Dict[str, ConnectionConfig] = {}
    for name, spec in raw.items():
        if isinstance(spec, str):
            spec = {"database": spec}
        if not isinstance(spec, dict) or not spec.get("database"):
            raise ConfigError(f"{source}: connection {name!r} needs a 'database' path")
        prefix = spec.get("prefix") or ""
        if not isinstance(prefix, str):
            raise ConfigError(f"{source}: prefix of connection {name!r} must be a string")
        out[str(name)] = ConnectionConfig(name=str(name), database=str(spec["database"]), prefix=prefix)
    return out


def _load_json(text: str, source: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{source}: invalid JSON ({e})") from e


def load_settings(environ: Optional[Mapping[str, str]] = None) -> GateSettings:
    env = os.environ if environ is None else environ

    default_connection = DEFAULT_CONNECTION_NAME
    connections: Dict[str, ConnectionConfig] = {}

    # 1) JSON file: {"default": "...", "connections": {...}}
    config_file = env.get(ENV_CONFIG_FILE)
    if config_file:
        path = Path(config_file)
        if not path.exists():
            raise ConfigError(f"{ENV_CONFIG_FILE}: {path} does not exist")
        data = _load_json(path.read_text(encoding="utf-8"), str(path))
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a JSON object")
        default_connection = data.get("default") or default_connection
        connections.update(_parse_connections(data.get("connections", {}), str(path)))

    # 2) Inline JSON overrides the file, connection by connection
    inline = env.get(ENV_CONNECTIONS)
    if inline:
        connections.update(_parse_connections(_load_json(inline, ENV_CONNECTIONS), ENV_CONNECTIONS))

    default_connection = env.get(ENV_DEFAULT_CONNECTION) or default_connection

    # 3) Single-connection shorthand
    database = env.get(ENV_DATABASE)
    if database:
        connections[default_connection] = ConnectionConfig(
            name=default_connection,
            database=database,
            prefix=env.get(ENV_PREFIX, ""),
        )

    return GateSettings(
        default_connection=default_connection,
        connections=connections,
    )
