"""Collaborator adapters."""

from netboot_bss.adapters.inventory import InventoryAdapter, InventoryResolver, NodeData

__all__ = [
    "InventoryAdapter",
    "InventoryResolver",
    "NodeData",
]
