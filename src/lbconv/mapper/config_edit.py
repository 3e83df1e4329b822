"""Entity mapper for the config/edit dialect.

Section paths map to entity kinds:

    load-balance virtual-server -> VirtualServer
    load-balance pool           -> Pool (+ nested pool_member -> PoolMember)
    load-balance real-server    -> RealServer
    system health-check         -> HealthMonitor
    system certificate local    -> Certificate

Any other section is left untouched in the tree. Sections nested in a
``config vdom`` item are mapped with that VDOM recorded on each entity;
names only need to be unique within one VDOM.
"""

import logging

from lbconv.mapper.base import BaseMapper
from lbconv.model.config import (
    Certificate,
    Configuration,
    HealthMonitor,
    Pool,
    PoolMember,
    RealServer,
    VirtualServer,
)
from lbconv.parser.coerce import CONFIG_EDIT_TRUTHY, to_int
from lbconv.parser.tree import Block, Item

logger = logging.getLogger(__name__)

VIRTUAL_SERVER_SECTION = "load-balance virtual-server"
POOL_SECTION = "load-balance pool"
POOL_MEMBER_SECTION = "pool_member"
REAL_SERVER_SECTION = "load-balance real-server"
HEALTH_CHECK_SECTION = "system health-check"
CERTIFICATE_SECTION = "system certificate local"
VDOM_SECTION = "vdom"

# Profile references collected into VirtualServer.profiles, in this order
PROFILE_KEYS = (
    "load-balance-profile",
    "client-ssl-profile",
    "http2-profile",
    "waf-profile",
)


class ConfigEditMapper(BaseMapper):
    """Maps a config/edit Block tree onto the Configuration graph."""

    truthy = CONFIG_EDIT_TRUTHY

    def map(self, root: Block) -> Configuration:
        """Map every recognised section, including those nested in VDOMs."""
        scopes: list[tuple[str | None, Block]] = [(None, root)]
        scopes.extend((vdom.name, vdom.body) for vdom in root.section(VDOM_SECTION))

        for kind, section, mapper in (
            ("real-server", REAL_SERVER_SECTION, self._map_real_server),
            ("health-monitor", HEALTH_CHECK_SECTION, self._map_health_monitor),
            ("pool", POOL_SECTION, self._map_pool),
            ("virtual-server", VIRTUAL_SERVER_SECTION, self._map_virtual_server),
        ):
            for vdom, scope in scopes:
                seen: set[str] = set()
                for item in scope.section(section):
                    self._check_duplicate(seen, kind, item.name, item)
                    mapper(item, vdom)

        for vdom, scope in scopes:
            for item in scope.section(CERTIFICATE_SECTION):
                self._map_certificate(item, vdom)

        logger.info("Mapped config/edit tree: %s", self.config.stats)
        return self.config

    def _map_virtual_server(self, item: Item, vdom: str | None) -> None:
        body = item.body
        vs = VirtualServer(name=item.name, vdom=vdom)
        vs.status = self._str(body, "status", vs.status)
        vs.type = self._str(body, "type", vs.type)
        vs.address = self._str(body, "address", vs.address)
        if not vs.address:
            vs.address = self._str(body, "address6", vs.address)
        vs.port, vs.service = self._port(body, "port", (vs.port, vs.service))
        vs.load_balance_method = self._str(body, "load-balance-method", vs.load_balance_method)
        vs.persistence = self._str(body, "load-balance-persistence", vs.persistence) or None
        for key in PROFILE_KEYS:
            vs.profiles.extend(self._list(body, key, []))
        vs.pool_name = self._str(body, "load-balance-pool", vs.pool_name) or None
        self.config.virtual_servers.append(vs)

    def _map_pool(self, item: Item, vdom: str | None) -> None:
        body = item.body
        pool = Pool(name=item.name, vdom=vdom)
        pool.type = self._str(body, "addr-type", self._str(body, "type", pool.type))
        pool.health_check = self._bool(body, "health-check", pool.health_check)
        pool.health_check_down_action = self._str(
            body, "service-down-action", pool.health_check_down_action
        )
        pool.health_check_names = self._list(body, "health-check-list", pool.health_check_names)
        relation = self._str(body, "health-check-relationship", pool.health_check_relation)
        pool.health_check_relation = relation.upper() if relation else pool.health_check_relation
        pool.load_balance_method = self._str(body, "load-balance-method", pool.load_balance_method)

        member_block = body.block(POOL_MEMBER_SECTION)
        if member_block is not None:
            for member_item in member_block.items:
                pool.members.append(self._map_member(member_item))
        self.config.pools.append(pool)

    def _map_member(self, item: Item) -> PoolMember:
        body = item.body
        member = PoolMember(id=to_int(item.name))
        member.port, member.service = self._port(body, "port", (member.port, member.service))
        member.weight = self._int(body, "weight", member.weight)
        member.status = self._str(body, "status", member.status)
        member.backup = self._bool(body, "backup", member.backup)
        member.real_server_name = self._str(body, "real-server", member.real_server_name) or None
        return member

    def _map_real_server(self, item: Item, vdom: str | None) -> None:
        body = item.body
        server = RealServer(name=item.name, vdom=vdom)
        server.address = self._str(body, "ip", server.address)
        if not server.address or server.address == "0.0.0.0":
            server.address = self._str(body, "ip6", server.address)
        server.status = self._str(body, "status", server.status)
        server.type = self._str(body, "type", server.type)
        self.config.real_servers.append(server)

    def _map_health_monitor(self, item: Item, vdom: str | None) -> None:
        body = item.body
        monitor = HealthMonitor(name=item.name, vdom=vdom)
        monitor.type = self._str(body, "type", monitor.type)
        monitor.interval = self._int(body, "interval", monitor.interval)
        monitor.timeout = self._int(body, "timeout", monitor.timeout)
        monitor.retry = self._int(body, "retry", self._int(body, "down-retry", monitor.retry))
        monitor.send_string = self._str(body, "send-string", monitor.send_string)
        monitor.expected_status = self._str(
            body, "status-code", self._str(body, "receive-string", monitor.expected_status)
        )
        monitor.hostname = self._str(body, "hostname", monitor.hostname)
        self.config.health_monitors.append(monitor)

    def _map_certificate(self, item: Item, vdom: str | None) -> None:
        """Merge certificate and key paths into one Certificate per name."""
        body = item.body
        cert = self.config.find_certificate(item.name, vdom)
        if cert is None:
            cert = Certificate(name=item.name, vdom=vdom)
            self.config.certificates.append(cert)
        for key in ("certificate", "cert", "certificate-file"):
            cert.certificate_file = self._str(body, key, cert.certificate_file)
        for key in ("key", "key-file"):
            cert.key_file = self._str(body, key, cert.key_file)
