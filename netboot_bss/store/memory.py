"""Volatile in-memory store."""

from __future__ import annotations

import logging

from netboot_bss.exceptions import AlreadyExistsError, InvalidVersionError, NotFoundError
from netboot_bss.models.bootparams import BootParams, BootParamsV1, VersionedBootParams
from netboot_bss.models.group import GroupTemplate
from netboot_bss.store.base import Store
from netboot_bss.store.lock import RWLock

logger = logging.getLogger(__name__)


class MemoryStore(Store):
    """Dict-backed store; state is lost when the process exits."""

    backend = "mem"

    def __init__(self) -> None:
        self._lock = RWLock()
        self._params: dict[str, VersionedBootParams] = {}
        self._v1: dict[str, BootParamsV1] = {}
        self._groups: dict[str, GroupTemplate] = {}

    def _record(self, id: str) -> VersionedBootParams:
        record = self._params.get(id)
        if record is None or not record.versions:
            raise NotFoundError(f"boot parameters '{id}' not found")
        return record

    async def set(self, id: str, params: BootParams) -> BootParams:
        async with self._lock.write():
            if id in self._params:
                raise AlreadyExistsError(f"boot parameters with ID '{id}' already exist")

            first = params.model_copy(deep=True)
            first.version = 1
            self._params[id] = VersionedBootParams(
                currentVersion=1,
                defaultVersion=1,
                versions=[first],
            )
            logger.info("Created boot parameters %s (version 1)", id)
            return first.model_copy(deep=True)

    async def get(self, id: str) -> BootParams:
        async with self._lock.read():
            record = self._record(id)
            return record.resolve(record.currentVersion)

    async def get_version(self, id: str, version: int) -> BootParams:
        async with self._lock.read():
            return self._record(id).resolve(version)

    async def get_default(self, id: str) -> BootParams:
        async with self._lock.read():
            record = self._record(id)
            return record.resolve(record.defaultVersion)

    async def update(self, id: str, params: BootParams) -> BootParams:
        async with self._lock.write():
            record = self._record(id)
            new = params.model_copy(deep=True)
            new.version = len(record.versions) + 1
            record.versions.append(new)
            record.currentVersion = new.version
            logger.info("Updated boot parameters %s (version %d)", id, new.version)
            return new.model_copy(deep=True)

    async def set_default(self, id: str, version: int) -> None:
        async with self._lock.write():
            record = self._record(id)
            if version < 1 or version > len(record.versions):
                raise InvalidVersionError(f"invalid version number {version}")
            record.defaultVersion = version
            logger.info("Default version of %s set to %d", id, version)

    async def delete(self, id: str) -> None:
        async with self._lock.write():
            if self._params.pop(id, None) is None:
                return
            for group in [g for g, t in self._groups.items() if t.paramId == id]:
                del self._groups[group]
            logger.info("Deleted boot parameters %s", id)

    async def list_ids(self) -> list[str]:
        async with self._lock.read():
            return sorted(self._params)

    async def list_versions(self, id: str) -> VersionedBootParams:
        async with self._lock.read():
            return self._record(id).model_copy(deep=True)

    async def set_v1(self, xname: str, params: BootParamsV1) -> None:
        async with self._lock.write():
            self._v1[xname] = params.model_copy(deep=True)

    async def get_v1(self, xname: str) -> BootParamsV1:
        async with self._lock.read():
            params = self._v1.get(xname)
            if params is None:
                raise NotFoundError(f"boot parameters for '{xname}' not found")
            return params.model_copy(deep=True)

    async def assign_template_to_group(self, id: str, group: str, version: int = 0) -> GroupTemplate:
        async with self._lock.write():
            record = self._record(id)
            if version == 0:
                version = record.defaultVersion
            if version < 1 or version > len(record.versions):
                raise InvalidVersionError(f"invalid version number {version}")

            binding = GroupTemplate(paramId=id, version=version)
            self._groups[group] = binding
            logger.info("Group %s bound to %s version %d", group, id, version)
            return binding.model_copy()

    async def get_template_for_group(self, group: str) -> BootParams:
        async with self._lock.read():
            binding = self._groups.get(group)
            if binding is None:
                raise NotFoundError(f"template for group '{group}' not found")
            return self._record(binding.paramId).resolve(binding.version)

    async def list_groups(self) -> dict[str, GroupTemplate]:
        async with self._lock.read():
            return {g: t.model_copy() for g, t in sorted(self._groups.items())}
