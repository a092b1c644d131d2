"""Render BootParams into an iPXE boot script."""

from __future__ import annotations

from netboot_bss.exceptions import ValidationError
from netboot_bss.models.bootparams import BootParams

CHAIN_URL = "https://api-gw-service-nmn.local/apis/bss/boot/v1/bootscript"
RETRY_LABEL = "boot_retry"
RETRY_SLEEP_S = 30


def _rootfs_flags(params: BootParams) -> list[str]:
    rootfs = params.rootFS
    if rootfs is None:
        return []

    flags: list[str] = []
    if rootfs.type == "nfs":
        flags.append("rd.neednet=1")
        if rootfs.server and rootfs.path:
            flags.append(f"root=nfs://{rootfs.server}:{rootfs.path}")
            if rootfs.options:
                flags.append(f"rootflags={rootfs.options}")
    elif rootfs.type == "local":
        if rootfs.path:
            flags.append(f"root={rootfs.path}")
            if rootfs.options:
                flags.append(f"rootflags={rootfs.options}")
    return flags


def _cloud_init_flag(params: BootParams) -> str | None:
    ci = params.cloudInit
    if ci is None or not ci.url:
        return None
    flag = f"ds=nocloud-net;s={ci.url}"
    if ci.version:
        flag += f";v={ci.version}"
    return flag


def build_kernel_line(params: BootParams) -> str:
    """Kernel line: image, root flags, datasource, raw params, fallback."""
    parts = [f"kernel --name kernel {params.kernel}"]
    parts.extend(_rootfs_flags(params))

    ds = _cloud_init_flag(params)
    if ds:
        parts.append(ds)

    if params.params:
        parts.append(params.params)

    parts.append(f"|| goto {RETRY_LABEL}")
    return " ".join(parts)


def build_chain_line(retry: int = 0, arch: str = "") -> str:
    query: list[str] = []
    if retry > 0:
        query.append(f"retry={retry}")
    if arch:
        query.append(f"arch={arch}")
    return f"chain {CHAIN_URL}?{'&'.join(query)}"


def generate_boot_script(params: BootParams, retry: int = 0, arch: str = "") -> str:
    """Generate the iPXE script for ``params``.

    Deterministic and side-effect free. Raises ValidationError when the
    kernel is empty, merged or externally sourced input included.
    """
    if not params.kernel:
        raise ValidationError("kernel must be specified")

    lines = ["#!ipxe", build_kernel_line(params)]
    if params.initrd:
        lines.append(f"initrd --name initrd {params.initrd} || goto {RETRY_LABEL}")
    lines.append(f"boot || goto {RETRY_LABEL}")
    lines.append(f":{RETRY_LABEL}")
    lines.append(f"sleep {RETRY_SLEEP_S}")
    lines.append(build_chain_line(retry, arch))
    return "\n".join(lines) + "\n"
