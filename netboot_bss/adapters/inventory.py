"""Resolve node identity and group membership from an inventory CSV."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, TypedDict

from netboot_bss.exceptions import NotFoundError

logger = logging.getLogger(__name__)

# MAC address pattern: 6 pairs of hex digits separated by colons or dashes
_MAC_RE = re.compile(r"^([0-9a-fA-F]{2}[:\-]){5}[0-9a-fA-F]{2}$")
# Simple IP v4 pattern
_IP_RE = re.compile(
    r"^(?:(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\.){3}(?:25[0-5]|2[0-4]\d|[01]?\d\d?)$"
)


class InventoryResolver(Protocol):
    """Maps network identity to a node identifier and its groups."""

    def id_from_ip(self, ip: str) -> str: ...

    def id_from_mac(self, mac: str) -> str: ...

    def group_membership(self, id: str) -> list[str]: ...


class NodeData(TypedDict):
    id: str
    mac: str | None
    ip: str | None
    groups: list[str]


def normalize_mac(raw: str) -> str | None:
    """Normalize a MAC address to uppercase colon-separated form.

    Returns None if the MAC is invalid.
    """
    raw = raw.strip()
    if not _MAC_RE.match(raw):
        return None
    return raw.upper().replace("-", ":")


def _validate_ip(raw: str) -> str | None:
    """Return the IP string if valid, else None."""
    raw = raw.strip()
    if _IP_RE.match(raw):
        return raw
    return None


class InventoryAdapter:
    """Parse an inventory CSV of ``id;mac;ip;group1,group2`` rows.

    Lines starting with ``#`` and blank lines are ignored. A missing or
    unreadable file leaves the previously loaded inventory in place.
    """

    def __init__(self, csv_path: Path | None):
        self._path = csv_path
        self._nodes: dict[str, NodeData] = {}
        self._by_mac: dict[str, str] = {}
        self._by_ip: dict[str, str] = {}
        self._last_modified: datetime | None = None

    def load(self) -> bool:
        """Load and parse the inventory. Returns True on success, False on failure."""
        if self._path is None:
            return False
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("Inventory file not found: %s", self._path)
            return False
        except OSError as exc:
            logger.error("Failed to read inventory file: %s", exc)
            return False

        stat = self._path.stat()
        self._last_modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

        nodes: dict[str, NodeData] = {}
        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            fields = [f.strip() for f in line.split(";")]
            fields += [""] * (4 - len(fields))
            node_id, raw_mac, raw_ip, raw_groups = fields[:4]

            if not node_id:
                logger.debug("Skipping line %d: empty node id", line_no)
                continue

            mac = normalize_mac(raw_mac) if raw_mac else None
            if raw_mac and mac is None:
                logger.debug("Line %d: ignoring invalid MAC %r", line_no, raw_mac)

            nodes[node_id] = NodeData(
                id=node_id,
                mac=mac,
                ip=_validate_ip(raw_ip) if raw_ip else None,
                groups=[g.strip() for g in raw_groups.split(",") if g.strip()],
            )

        self._nodes = nodes
        self._by_mac = {n["mac"]: n["id"] for n in nodes.values() if n["mac"]}
        self._by_ip = {n["ip"]: n["id"] for n in nodes.values() if n["ip"]}
        logger.info("Loaded %d nodes from %s", len(nodes), self._path)
        return True

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def nodes(self) -> dict[str, NodeData]:
        return self._nodes

    @property
    def last_modified(self) -> datetime | None:
        return self._last_modified

    def get_node(self, id: str) -> NodeData | None:
        return self._nodes.get(id)

    def id_from_mac(self, mac: str) -> str:
        normalized = normalize_mac(mac)
        node_id = self._by_mac.get(normalized) if normalized else None
        if node_id is None:
            raise NotFoundError(f"No node found with MAC {mac}")
        return node_id

    def id_from_ip(self, ip: str) -> str:
        node_id = self._by_ip.get(ip.strip())
        if node_id is None:
            raise NotFoundError(f"No node found with IP {ip}")
        return node_id

    def group_membership(self, id: str) -> list[str]:
        node = self.get_node(id)
        if node is None:
            raise NotFoundError(f"No node found with id '{id}'")
        return list(node["groups"])
