"""Resolve a node to the boot parameters that should be rendered for it."""

from __future__ import annotations

import logging

from netboot_bss.adapters.inventory import InventoryResolver
from netboot_bss.exceptions import NotFoundError
from netboot_bss.models.bootparams import BootParams, merge_boot_params, validate_boot_params
from netboot_bss.store.base import Store

logger = logging.getLogger(__name__)


async def collect_fragments(store: Store, inventory: InventoryResolver, node_id: str) -> list[BootParams]:
    """Boot parameter fragments for ``node_id``, highest precedence first.

    The node's own default version comes first, followed by the template
    bound to each of its groups in membership order. Groups without a
    binding are skipped.
    """
    fragments: list[BootParams] = []

    try:
        fragments.append(await store.get_default(node_id))
    except NotFoundError:
        logger.debug("No node-specific boot parameters for %s", node_id)

    try:
        groups = inventory.group_membership(node_id)
    except NotFoundError:
        groups = []

    for group in groups:
        try:
            fragments.append(await store.get_template_for_group(group))
        except NotFoundError:
            logger.debug("Group %s of %s has no template", group, node_id)

    return fragments


async def resolve_boot_params(store: Store, inventory: InventoryResolver, node_id: str) -> BootParams:
    """Merge every fragment for ``node_id`` into one renderable BootParams.

    Raises NotFoundError when nothing applies, ValidationError when the
    merged result lacks a kernel or initrd.
    """
    fragments = await collect_fragments(store, inventory, node_id)
    if not fragments:
        raise NotFoundError(f"No boot parameters found for {node_id}")

    merged = merge_boot_params(fragments)
    validate_boot_params(merged)
    logger.debug("Resolved %s from %d fragment(s)", node_id, len(fragments))
    return merged
