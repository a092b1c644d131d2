"""Persistent store backed by SQLite through aiosqlite."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import AsyncIterator, Iterator

import aiosqlite
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from netboot_bss.exceptions import (
    AlreadyExistsError,
    BackendError,
    InvalidVersionError,
    NotFoundError,
)
from netboot_bss.models.bootparams import BootParams, BootParamsV1, VersionedBootParams
from netboot_bss.models.group import GroupTemplate
from netboot_bss.store.base import Store
from netboot_bss.store.lock import RWLock

logger = logging.getLogger(__name__)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS boot_params (
    id TEXT PRIMARY KEY,
    current_version INTEGER NOT NULL,
    default_version INTEGER NOT NULL,
    versions TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS v1_boot_params (
    xname TEXT PRIMARY KEY,
    data TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS group_templates (
    group_name TEXT PRIMARY KEY,
    param_id TEXT NOT NULL REFERENCES boot_params(id) ON DELETE CASCADE,
    version INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_group_templates_param ON group_templates(param_id);
"""

_VERSIONS = TypeAdapter(list[BootParams])


def _dump_versions(versions: list[BootParams]) -> str:
    return _VERSIONS.dump_json(versions, by_alias=True, exclude_none=True).decode()


@contextmanager
def _backend_errors(action: str) -> Iterator[None]:
    """Re-raise sqlite and (de)serialisation failures as BackendError."""
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("Failed to %s: %s", action, exc)
        raise BackendError(f"failed to {action}: {exc}") from exc
    except (PydanticValidationError, ValueError) as exc:
        logger.error("Corrupt record while trying to %s: %s", action, exc)
        raise BackendError(f"failed to {action}: stored record is unreadable") from exc


class SQLiteStore(Store):
    """Store with one row per identifier holding the serialised history.

    Tables: ``boot_params`` (current/default version numbers and the JSON
    version list), ``v1_boot_params`` (legacy records as JSON) and
    ``group_templates`` (group -> identifier/version, cascading on delete).
    """

    backend = "sqlite"

    def __init__(self, db_path: Path | str):
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        self._lock = RWLock()

    async def open(self) -> None:
        """Open the database, enable foreign keys, create tables."""
        if str(self._db_path) != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        with _backend_errors("open database"):
            # Autocommit mode; transactions are explicit below.
            self._db = await aiosqlite.connect(str(self._db_path), isolation_level=None)
            await self._db.execute("PRAGMA foreign_keys = ON")
            await self._db.executescript(_SCHEMA)

        logger.info("SQLiteStore opened at %s", self._db_path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("SQLiteStore closed")

    @property
    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("SQLiteStore not opened")
        return self._db

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Run the block in one transaction; roll back on any exception."""
        db = self._conn
        await db.execute("BEGIN IMMEDIATE")
        try:
            yield db
            await db.execute("COMMIT")
        except BaseException:
            if db.in_transaction:
                await db.execute("ROLLBACK")
            raise

    async def _load(self, id: str) -> VersionedBootParams:
        async with self._conn.execute(
            "SELECT current_version, default_version, versions FROM boot_params WHERE id = ?",
            (id,),
        ) as cur:
            row = await cur.fetchone()
        if row is None:
            raise NotFoundError(f"boot parameters '{id}' not found")

        record = VersionedBootParams(
            currentVersion=row[0],
            defaultVersion=row[1],
            versions=_VERSIONS.validate_json(row[2]),
        )
        if not record.versions:
            raise NotFoundError(f"boot parameters '{id}' not found")
        return record

    # -- Versioned boot parameters -------------------------------------------

    async def set(self, id: str, params: BootParams) -> BootParams:
        first = params.model_copy(deep=True)
        first.version = 1

        async with self._lock.write():
            with _backend_errors("insert boot parameters"):
                async with self._transaction() as db:
                    async with db.execute("SELECT 1 FROM boot_params WHERE id = ?", (id,)) as cur:
                        if await cur.fetchone() is not None:
                            raise AlreadyExistsError(f"boot parameters with ID '{id}' already exist")
                    await db.execute(
                        "INSERT INTO boot_params (id, current_version, default_version, versions) "
                        "VALUES (?, ?, ?, ?)",
                        (id, 1, 1, _dump_versions([first])),
                    )

        logger.info("Created boot parameters %s (version 1)", id)
        return first

    async def get(self, id: str) -> BootParams:
        async with self._lock.read():
            with _backend_errors("query boot parameters"):
                record = await self._load(id)
        return record.resolve(record.currentVersion)

    async def get_version(self, id: str, version: int) -> BootParams:
        async with self._lock.read():
            with _backend_errors("query boot parameters"):
                record = await self._load(id)
        return record.resolve(version)

    async def get_default(self, id: str) -> BootParams:
        async with self._lock.read():
            with _backend_errors("query boot parameters"):
                record = await self._load(id)
        return record.resolve(record.defaultVersion)

    async def update(self, id: str, params: BootParams) -> BootParams:
        async with self._lock.write():
            with _backend_errors("update boot parameters"):
                async with self._transaction() as db:
                    record = await self._load(id)
                    new = params.model_copy(deep=True)
                    new.version = len(record.versions) + 1
                    record.versions.append(new)
                    await db.execute(
                        "UPDATE boot_params SET current_version = ?, versions = ? WHERE id = ?",
                        (new.version, _dump_versions(record.versions), id),
                    )

        logger.info("Updated boot parameters %s (version %d)", id, new.version)
        return new.model_copy(deep=True)

    async def set_default(self, id: str, version: int) -> None:
        async with self._lock.write():
            with _backend_errors("update default version"):
                async with self._transaction() as db:
                    record = await self._load(id)
                    if version < 1 or version > len(record.versions):
                        raise InvalidVersionError(f"invalid version number {version}")
                    await db.execute(
                        "UPDATE boot_params SET default_version = ? WHERE id = ?",
                        (version, id),
                    )

        logger.info("Default version of %s set to %d", id, version)

    async def delete(self, id: str) -> None:
        async with self._lock.write():
            with _backend_errors("delete boot parameters"):
                async with self._transaction() as db:
                    await db.execute("DELETE FROM group_templates WHERE param_id = ?", (id,))
                    cur = await db.execute("DELETE FROM boot_params WHERE id = ?", (id,))
                    deleted = cur.rowcount
                    await cur.close()

        if deleted:
            logger.info("Deleted boot parameters %s", id)

    async def list_ids(self) -> list[str]:
        async with self._lock.read():
            with _backend_errors("list boot parameters"):
                async with self._conn.execute("SELECT id FROM boot_params ORDER BY id") as cur:
                    rows = await cur.fetchall()
        return [row[0] for row in rows]

    async def list_versions(self, id: str) -> VersionedBootParams:
        async with self._lock.read():
            with _backend_errors("query boot parameters"):
                return await self._load(id)

    # -- Legacy V1 records ---------------------------------------------------

    async def set_v1(self, xname: str, params: BootParamsV1) -> None:
        async with self._lock.write():
            with _backend_errors("store boot parameters"):
                data = params.model_dump_json(by_alias=True, exclude_none=True)
                await self._conn.execute(
                    "INSERT OR REPLACE INTO v1_boot_params (xname, data) VALUES (?, ?)",
                    (xname, data),
                )

    async def get_v1(self, xname: str) -> BootParamsV1:
        async with self._lock.read():
            with _backend_errors("query boot parameters"):
                async with self._conn.execute(
                    "SELECT data FROM v1_boot_params WHERE xname = ?", (xname,)
                ) as cur:
                    row = await cur.fetchone()
                if row is None:
                    raise NotFoundError(f"boot parameters for '{xname}' not found")
                return BootParamsV1.model_validate_json(row[0])

    # -- Group template bindings ---------------------------------------------

    async def assign_template_to_group(self, id: str, group: str, version: int = 0) -> GroupTemplate:
        async with self._lock.write():
            with _backend_errors("assign template to group"):
                async with self._transaction() as db:
                    record = await self._load(id)
                    if version == 0:
                        version = record.defaultVersion
                    if version < 1 or version > len(record.versions):
                        raise InvalidVersionError(f"invalid version number {version}")
                    await db.execute(
                        "INSERT OR REPLACE INTO group_templates (group_name, param_id, version) "
                        "VALUES (?, ?, ?)",
                        (group, id, version),
                    )

        logger.info("Group %s bound to %s version %d", group, id, version)
        return GroupTemplate(paramId=id, version=version)

    async def get_template_for_group(self, group: str) -> BootParams:
        async with self._lock.read():
            with _backend_errors("query template"):
                async with self._conn.execute(
                    "SELECT param_id, version FROM group_templates WHERE group_name = ?",
                    (group,),
                ) as cur:
                    row = await cur.fetchone()
                if row is None:
                    raise NotFoundError(f"template for group '{group}' not found")
                record = await self._load(row[0])
        return record.resolve(row[1])

    async def list_groups(self) -> dict[str, GroupTemplate]:
        async with self._lock.read():
            with _backend_errors("list group templates"):
                async with self._conn.execute(
                    "SELECT group_name, param_id, version FROM group_templates ORDER BY group_name"
                ) as cur:
                    rows = await cur.fetchall()
        return {row[0]: GroupTemplate(paramId=row[1], version=row[2]) for row in rows}
