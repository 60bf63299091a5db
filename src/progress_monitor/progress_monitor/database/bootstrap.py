"""Schema bootstrap for local and CI databases.

Production schemas are migrated out of band; this only runs when
AUTO_INIT_DB is set or from scripts/init_db.py.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from .connection import DBConfig

log = logging.getLogger(__name__)

# Statements are separated by ';' outside of quoted literals.
_STATEMENT = re.compile(r"""(?:'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|[^;'"])+""")
_DATABASE_DIRECTIVE = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;")


def split_statements(sql: str) -> Iterator[str]:
    """Yield executable statements from a schema file.

    `--` line comments are dropped, as are CREATE DATABASE / USE directives
    so the same file works against any configured database name.
    """
    body = "\n".join(ln for ln in sql.splitlines() if not ln.lstrip().startswith("--"))
    body = _DATABASE_DIRECTIVE.sub("", body)
    for match in _STATEMENT.finditer(body):
        stmt = match.group(0).strip()
        if stmt:
            yield stmt


@retry(
    stop=stop_after_attempt(10),
    wait=wait_fixed(2),
    retry=retry_if_exception_type(mysql.connector.errors.InterfaceError),
    before_sleep=before_sleep_log(log, logging.WARNING),
    reraise=True,
)
def _server_connection(config: DBConfig, *, with_database: bool = True):
    # InterfaceError covers "server not reachable yet" when MySQL starts alongside the app.
    return mysql.connector.connect(**config.connect_kwargs(with_database=with_database))


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = _server_connection(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    """Create the database if needed and run every statement of the schema file.

    Returns the number of statements executed.
    """
    ensure_database_exists(db_config)
    statements = list(split_statements(Path(schema_path).read_text(encoding="utf-8")))

    conn = _server_connection(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()

    log.info("schema applied from %s (%d statements)", schema_path, len(statements))
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    conn = _server_connection(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
    finally:
        conn.close()
