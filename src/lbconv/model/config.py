"""Configuration graph dataclasses - The vendor-neutral object model.

Every field carries its declared default. Mappers construct entities with
defaults first and only overwrite what the source actually sets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from lbconv.model.diagnostic import Diagnostic, Severity


class Dialect(Enum):
    """Supported configuration text grammars."""

    CONFIG_EDIT = "config-edit"  # config / edit / set / next / end
    BRACE = "brace"  # <type-path> <name> { ... }


@dataclass
class HealthMonitor:
    """Health check definition."""

    name: str
    type: str = ""  # http, tcp, icmp, ...
    interval: int = 5  # seconds
    timeout: int = 16  # seconds
    retry: int = 3
    send_string: str | None = None
    expected_status: str | None = None  # status code or receive string
    hostname: str | None = None
    vdom: str | None = None  # owning VDOM, None for the root scope


@dataclass
class RealServer:
    """Backend host."""

    name: str
    address: str = ""  # IPv4 or IPv6
    status: str = "enable"
    type: str = "ip"  # ip or fqdn
    vdom: str | None = None


@dataclass
class PoolMember:
    """One backend endpoint inside a pool."""

    id: int = 0
    port: int = 0
    service: str | None = None  # service-name alias; port stays 0 when set
    weight: int = 1
    status: str = "enable"
    backup: bool = False
    real_server_name: str | None = None

    # Filled by the resolver
    real_server: RealServer | None = None


@dataclass
class Pool:
    """Backend group with its owned members."""

    name: str
    type: str = "ipv4"
    health_check: bool = True
    health_check_down_action: str = "none"
    health_check_names: list[str] = field(default_factory=list)
    health_check_relation: str = "AND"  # AND or OR
    load_balance_method: str = "round-robin"
    members: list[PoolMember] = field(default_factory=list)
    vdom: str | None = None

    # Filled by the resolver, same order as health_check_names
    health_monitors: list[HealthMonitor] = field(default_factory=list)


@dataclass
class VirtualServer:
    """Listener definition."""

    name: str
    status: str = "enable"
    type: str = "standard"
    address: str = ""
    port: int = 0
    service: str | None = None  # service-name alias; port stays 0 when set
    load_balance_method: str = "round-robin"
    persistence: str | None = None
    profiles: list[str] = field(default_factory=list)
    rules: list[str] = field(default_factory=list)
    pool_name: str | None = None
    vdom: str | None = None

    # Filled by the resolver
    pool: Pool | None = None

    @property
    def listener(self) -> str:
        """Get address:port-or-service for display."""
        return f"{self.address}:{self.service or self.port}"


@dataclass
class Certificate:
    """Certificate and key file paths, merged by name."""

    name: str
    certificate_file: str | None = None
    key_file: str | None = None
    vdom: str | None = None


@dataclass
class Configuration:
    """Root container handed to renderers.

    Renderers only read this graph. Resolved references may be None.
    """

    virtual_servers: list[VirtualServer] = field(default_factory=list)
    pools: list[Pool] = field(default_factory=list)
    real_servers: list[RealServer] = field(default_factory=list)
    health_monitors: list[HealthMonitor] = field(default_factory=list)
    certificates: list[Certificate] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Dedup lookup kept beside the list, outside the dataclass fields
        self._diagnostic_keys: set[Diagnostic] = set(self.diagnostics)

    @property
    def vendor(self) -> str:
        return self.metadata.get("vendor", "")

    def add_diagnostic(
        self,
        message: str,
        line_number: int = 0,
        excerpt: str = "",
        severity: Severity = Severity.WARNING,
    ) -> None:
        """Record a non-fatal diagnostic once."""
        diagnostic = Diagnostic(severity, message, line_number, excerpt)
        if diagnostic not in self._diagnostic_keys:
            self._diagnostic_keys.add(diagnostic)
            self.diagnostics.append(diagnostic)

    def find_certificate(self, name: str, vdom: str | None = None) -> Certificate | None:
        return next((c for c in self.certificates if c.name == name and c.vdom == vdom), None)

    def unresolved_references(self) -> list[str]:
        """List dangling references as ``kind 'owner' -> 'target'`` strings."""
        dangling = []
        for vs in self.virtual_servers:
            if vs.pool_name and vs.pool is None:
                dangling.append(f"virtual-server '{vs.name}' -> pool '{vs.pool_name}'")
        for pool in self.pools:
            resolved = {m.name for m in pool.health_monitors}
            for hc_name in pool.health_check_names:
                if hc_name not in resolved:
                    dangling.append(f"pool '{pool.name}' -> health-monitor '{hc_name}'")
            for member in pool.members:
                if member.real_server_name and member.real_server is None:
                    dangling.append(
                        f"pool '{pool.name}' member {member.id} -> real-server '{member.real_server_name}'"
                    )
        return dangling

    @property
    def stats(self) -> dict[str, int]:
        return {
            "virtual_servers": len(self.virtual_servers),
            "pools": len(self.pools),
            "pool_members": sum(len(p.members) for p in self.pools),
            "real_servers": len(self.real_servers),
            "health_monitors": len(self.health_monitors),
            "certificates": len(self.certificates),
        }
