"""Boot parameter record models, validation and fragment merging."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from netboot_bss.exceptions import InvalidVersionError, ValidationError


class RootFS(BaseModel):
    type: Literal["nfs", "local"]
    server: str = ""
    path: str = ""
    options: str = ""


class CloudInitServer(BaseModel):
    url: str = ""
    version: str = ""


class BootParams(BaseModel):
    """One concrete kernel/initrd/rootfs/cloud-init boot configuration.

    ``version`` is assigned by the store; whatever a caller sends is
    overwritten on write.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: int = Field(default=0, ge=0)
    params: str = ""
    kernel: str = ""
    initrd: str = ""
    rootFS: RootFS | None = Field(default=None, alias="rootfs")
    cloudInit: CloudInitServer | None = Field(default=None, alias="cloud-init")


class VersionedBootParams(BaseModel):
    """Append-only history of BootParams under one identifier.

    ``versions[i]`` holds version ``i + 1``.
    """

    currentVersion: int = 0
    defaultVersion: int = 0
    versions: list[BootParams] = Field(default_factory=list)

    def resolve(self, version: int) -> BootParams:
        """Return a copy of ``version``; raise if it is out of range."""
        if version < 1 or version > len(self.versions):
            raise InvalidVersionError(
                f"invalid version number {version}",
                details={"available": len(self.versions)},
            )
        return self.versions[version - 1].model_copy(deep=True)


class BootParamsV1(BaseModel):
    """Legacy single-version record, keyed by hardware identifier."""

    model_config = ConfigDict(populate_by_name=True)

    hosts: list[str] | None = None
    macs: list[str] | None = None
    nids: list[int] | None = None
    group: str = ""
    params: str = ""
    kernel: str = ""
    initrd: str = ""
    cloudInit: CloudInitServer | None = Field(default=None, alias="cloud-init")
    referralToken: str = Field(default="", alias="referral_token")


class V1AddResponse(BaseModel):
    hosts: list[str]
    bad_macs: list[str]


def validate_boot_params(params: BootParams | BootParamsV1) -> None:
    """Raise ValidationError unless both kernel and initrd are set."""
    if not params.kernel or not params.initrd:
        raise ValidationError("kernel and initrd must both be specified")


def merge_boot_params(fragments: list[BootParams]) -> BootParams:
    """Compose partial fragments into one BootParams.

    kernel and initrd each come from the first fragment that sets them,
    params from every fragment joined in order, rootfs and cloud-init from
    the first fragment that carries one. The fragments are not validated;
    the merged result is what gets checked before rendering.
    """
    merged = BootParams()
    extra: list[str] = []
    for fragment in fragments:
        if fragment.params:
            extra.append(fragment.params)
        if not merged.kernel and fragment.kernel:
            merged.kernel = fragment.kernel
        if not merged.initrd and fragment.initrd:
            merged.initrd = fragment.initrd
        if merged.rootFS is None and fragment.rootFS is not None:
            merged.rootFS = fragment.rootFS.model_copy()
        if merged.cloudInit is None and fragment.cloudInit is not None:
            merged.cloudInit = fragment.cloudInit.model_copy()
    merged.params = " ".join(extra)
    return merged
