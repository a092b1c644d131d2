"""Store contract shared by the in-memory and SQLite backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from netboot_bss.models.bootparams import BootParams, BootParamsV1, VersionedBootParams
from netboot_bss.models.group import GroupTemplate


class Store(ABC):
    """Persist BootParams histories, legacy V1 records and group bindings.

    Every accessor returns a copy; mutating a returned object never changes
    what the store holds. Writers copy their argument before assigning the
    version number, so the caller's object is left untouched.
    """

    backend: str = ""

    async def open(self) -> None:
        """Acquire backend resources. No-op unless the backend needs it."""

    async def close(self) -> None:
        """Release backend resources."""

    # -- Versioned boot parameters -------------------------------------------

    @abstractmethod
    async def set(self, id: str, params: BootParams) -> BootParams:
        """Create ``id`` at version 1. AlreadyExistsError if present."""

    @abstractmethod
    async def get(self, id: str) -> BootParams:
        """Current version of ``id``."""

    @abstractmethod
    async def get_version(self, id: str, version: int) -> BootParams:
        """Version ``version`` (1-based) of ``id``."""

    @abstractmethod
    async def get_default(self, id: str) -> BootParams:
        """Default version of ``id``."""

    @abstractmethod
    async def update(self, id: str, params: BootParams) -> BootParams:
        """Append a new version and make it current."""

    @abstractmethod
    async def set_default(self, id: str, version: int) -> None:
        """Point the default at an existing version."""

    @abstractmethod
    async def delete(self, id: str) -> None:
        """Remove the history of ``id`` and every group bound to it."""

    @abstractmethod
    async def list_ids(self) -> list[str]:
        ...

    @abstractmethod
    async def list_versions(self, id: str) -> VersionedBootParams:
        ...

    # -- Legacy V1 records ---------------------------------------------------

    @abstractmethod
    async def set_v1(self, xname: str, params: BootParamsV1) -> None:
        ...

    @abstractmethod
    async def get_v1(self, xname: str) -> BootParamsV1:
        ...

    # -- Group template bindings ---------------------------------------------

    @abstractmethod
    async def assign_template_to_group(self, id: str, group: str, version: int = 0) -> GroupTemplate:
        """Bind ``group`` to a concrete version of ``id``.

        Version 0 means the identifier's default version at the time of the
        call; the resolved number is stored, not the "default" intent.
        """

    @abstractmethod
    async def get_template_for_group(self, group: str) -> BootParams:
        ...

    @abstractmethod
    async def list_groups(self) -> dict[str, GroupTemplate]:
        ...
