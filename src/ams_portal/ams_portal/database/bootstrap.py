from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.security import generate_password_hash

from ..core.constants import (
    DEFAULT_CASUAL_ENTITLEMENT,
    DEFAULT_PAID_ENTITLEMENT,
    DEFAULT_SICK_ENTITLEMENT,
)
from ..core.enums import AuthMethod, EmploymentStatus, Role, SaturdayPolicy
from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def split_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quoted strings; strips comment lines."""
    sql = "\n".join(line for line in sql.splitlines() if not line.strip().startswith("--"))
    buf: list[str] = []
    quote: Optional[str] = None
    escaped = False

    for ch in sql:
        buf.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    """Create the database if needed and run the idempotent schema script."""
    factory = DatabaseConnection(DBConfig.from_dict(db_config))
    name = factory.config.database

    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()

    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _USE_RE.sub("", _CREATE_DB_RE.sub("", sql))

    conn = factory.connect()
    try:
        cur = conn.cursor()
        for stmt in split_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s", name)


def ensure_admin_user(db_config: dict, *, email: str, password: str) -> None:
    """Make sure a bootstrap Admin account exists (no-op if the email is taken)."""
    factory = DatabaseConnection(DBConfig.from_dict(db_config))
    conn = factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE email=%s", (email.lower(),))
        if cur.fetchone():
            return
        cur.execute(
            """
            INSERT INTO users(
                employee_code, full_name, email, password_hash, role, auth_method,
                department, designation, joining_date, saturday_policy, employment_status,
                sick_balance, casual_balance, paid_balance,
                sick_entitlement, casual_entitlement, paid_entitlement, is_active
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,CURDATE(),%s,%s,%s,%s,%s,%s,%s,%s,1)
            """,
            (
                "ADMIN001",
                "Administrator",
                email.lower(),
                generate_password_hash(password),
                Role.ADMIN.value,
                AuthMethod.LOCAL.value,
                "Administration",
                "Administrator",
                SaturdayPolicy.ALL_OFF.value,
                EmploymentStatus.PERMANENT.value,
                DEFAULT_SICK_ENTITLEMENT,
                DEFAULT_CASUAL_ENTITLEMENT,
                DEFAULT_PAID_ENTITLEMENT,
                DEFAULT_SICK_ENTITLEMENT,
                DEFAULT_CASUAL_ENTITLEMENT,
                DEFAULT_PAID_ENTITLEMENT,
            ),
        )
        conn.commit()
        logger.info("Bootstrap admin %s created", email)
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
