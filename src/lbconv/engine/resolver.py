"""Reference resolution - the link pass that runs after all mapping.

Parsing and linking are kept strictly apart so forward references (a
virtual server naming a pool defined further down) need no special
handling. Lookups are exact, case-sensitive name matches against indexes
built once per collection; the first definition of a name wins. Names are
scoped by VDOM: an entity inside a VDOM links to targets of the same VDOM,
then falls back to the root scope.

Resolution only writes the referencing entity's resolved field. It never
adds, removes or reorders entities, so running it twice gives the same
graph.
"""

from __future__ import annotations

import logging
from typing import Callable, Hashable, TypeVar

from lbconv.model.config import Configuration, HealthMonitor, Pool, RealServer
from lbconv.model.diagnostic import Severity

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_index(entities: list[T], key: Callable[[T], Hashable] | None = None) -> dict:
    """Index entities by name (or ``key``), keeping the first of any duplicates."""
    index: dict = {}
    for entity in entities:
        index.setdefault(key(entity) if key else entity.name, entity)  # type: ignore[attr-defined]
    return index


def scope_key(entity) -> tuple[str | None, str]:
    """Index key of an entity: its VDOM and its name."""
    return entity.vdom, entity.name


def _in_vdom(vdom: str | None) -> str:
    return f" in VDOM '{vdom}'" if vdom else ""


class ReferenceResolver:
    """Links entities of one Configuration by name."""

    def __init__(self, config: Configuration) -> None:
        self.config = config
        self._pools: dict[tuple, Pool] = build_index(config.pools, scope_key)
        self._monitors: dict[tuple, HealthMonitor] = build_index(config.health_monitors, scope_key)
        self._real_servers: dict[tuple, RealServer] = build_index(config.real_servers, scope_key)

    def resolve(self) -> Configuration:
        """Run the three link steps in their fixed order."""
        self._resolve_virtual_server_pools()
        self._resolve_pool_monitors()
        self._resolve_member_real_servers()
        return self.config

    def _resolve_virtual_server_pools(self) -> None:
        for vs in self.config.virtual_servers:
            if not vs.pool_name:
                continue
            vs.pool = self._lookup(self._pools, vs.vdom, vs.pool_name)
            if vs.pool is None:
                self._dangling(
                    f"Virtual server '{vs.name}'{_in_vdom(vs.vdom)} references unknown pool '{vs.pool_name}'"
                )

    def _resolve_pool_monitors(self) -> None:
        for pool in self.config.pools:
            if not pool.health_check_names:
                continue
            resolved = []
            for name in pool.health_check_names:
                monitor = self._lookup(self._monitors, pool.vdom, name)
                if monitor is None:
                    self._dangling(
                        f"Pool '{pool.name}'{_in_vdom(pool.vdom)} references unknown health monitor '{name}'"
                    )
                    continue
                resolved.append(monitor)
            pool.health_monitors = resolved

    def _resolve_member_real_servers(self) -> None:
        for pool in self.config.pools:
            for member in pool.members:
                if not member.real_server_name:
                    continue
                member.real_server = self._lookup(self._real_servers, pool.vdom, member.real_server_name)
                if member.real_server is None:
                    self._dangling(
                        f"Pool '{pool.name}'{_in_vdom(pool.vdom)} member {member.id} references unknown real server "
                        f"'{member.real_server_name}'"
                    )

    @staticmethod
    def _lookup(index: dict[tuple, T], vdom: str | None, name: str) -> T | None:
        found = index.get((vdom, name))
        if found is None and vdom is not None:
            found = index.get((None, name))
        return found

    def _dangling(self, message: str) -> None:
        logger.debug(message)
        self.config.add_diagnostic(message, severity=Severity.INFO)


def resolve_references(config: Configuration) -> Configuration:
    """Resolve all named references in ``config`` in place."""
    return ReferenceResolver(config).resolve()
