"""Entity mapper for the brace-delimited dialect.

Object type paths map to entity kinds:

    ltm node            -> RealServer
    ltm monitor <type>  -> HealthMonitor
    ltm pool            -> Pool (+ members block -> PoolMember)
    ltm virtual         -> VirtualServer
    sys file ssl-cert   -> Certificate.certificate_file
    sys file ssl-key    -> Certificate.key_file

Names keep their partition on the tree; entities use the bare name.
"""

import logging
import re

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
from lbconv.parser.brace import MONITOR_TYPE_PREFIX
from lbconv.parser.coerce import (
    BRACE_TRUTHY,
    bare_name,
    looks_numeric,
    parse_destination,
    parse_member_key,
    to_str,
    to_str_list,
)
from lbconv.parser.tree import Block, Item

logger = logging.getLogger(__name__)

NODE_TYPE = "ltm node"
POOL_TYPE = "ltm pool"
VIRTUAL_TYPE = "ltm virtual"
SSL_CERT_TYPE = "sys file ssl-cert"
SSL_KEY_TYPE = "sys file ssl-key"

# Flags on a virtual that change its type away from "standard"
VIRTUAL_TYPE_FLAGS = ("ip-forward", "l2-forward", "reject", "internal", "stateless", "dhcp-relay")

# Example: send "GET / HTTP/1.1\r\nHost: www.example.com\r\n\r\n"
HOST_HEADER_RE = re.compile(r"Host:\s*([^\s\\]+)", re.IGNORECASE)
MIN_OF_RE = re.compile(r"^min\s+\d+\s+of\s*\{(.*)\}\s*$", re.IGNORECASE)


def _is_disabled(body: Block) -> bool:
    """Member/node disabled or forced offline by the administrator."""
    session = to_str(body.get("session")) or ""
    state = to_str(body.get("state")) or ""
    return session == "user-disabled" or state == "user-down"


def parse_monitor_expression(text: str | None) -> tuple[list[str], str]:
    """Split a pool monitor expression into bare names and AND/OR relation.

    ``/Common/http and /Common/tcp`` requires all monitors (AND);
    ``min 1 of { /Common/http /Common/tcp }`` requires any (OR).
    """
    if not text:
        return [], "AND"
    match = MIN_OF_RE.match(text.strip())
    if match:
        names = [bare_name(t) for t in match.group(1).split() if t.strip()]
        return names, "OR"
    names = [bare_name(t) for t in text.split() if t.strip() and t.lower() != "and"]
    return names, "AND"


class BraceMapper(BaseMapper):
    """Maps a brace-dialect Block tree onto the Configuration graph."""

    truthy = BRACE_TRUTHY

    def map(self, root: Block) -> Configuration:
        """Map recognised objects, one collection at a time, in document order."""
        self._map_section(root.section(NODE_TYPE), "real-server", self._map_node)

        # Monitors of different types live in different sections
        monitors = [
            (item, path[len(MONITOR_TYPE_PREFIX):])
            for path in root
            if path.startswith(MONITOR_TYPE_PREFIX)
            for item in root.section(path)
        ]
        monitors.sort(key=lambda pair: pair[0].line_number)
        seen: set[str] = set()
        for item, monitor_type in monitors:
            self._check_duplicate(seen, "health-monitor", bare_name(item.name), item)
            self._map_monitor(item, monitor_type)

        self._map_section(root.section(POOL_TYPE), "pool", self._map_pool)
        self._map_section(root.section(VIRTUAL_TYPE), "virtual-server", self._map_virtual)

        files = [(item, SSL_CERT_TYPE) for item in root.section(SSL_CERT_TYPE)]
        files += [(item, SSL_KEY_TYPE) for item in root.section(SSL_KEY_TYPE)]
        files.sort(key=lambda pair: pair[0].line_number)
        for item, file_type in files:
            self._map_ssl_file(item, file_type)

        logger.info("Mapped brace tree: %s", self.config.stats)
        return self.config

    def _map_section(self, items: list[Item], kind: str, mapper) -> None:
        seen: set[str] = set()
        for item in items:
            self._check_duplicate(seen, kind, bare_name(item.name), item)
            mapper(item)

    def _map_node(self, item: Item) -> None:
        body = item.body
        server = RealServer(name=bare_name(item.name))
        server.address = self._str(body, "address", server.address)
        fqdn = body.block("fqdn")
        if fqdn is not None and to_str(fqdn.get("name")):
            server.type = "fqdn"
            if not server.address or server.address == "any6":
                server.address = to_str(fqdn.get("name")) or ""
        if _is_disabled(body):
            server.status = "disable"
        self.config.real_servers.append(server)

    def _map_monitor(self, item: Item, monitor_type: str) -> None:
        body = item.body
        monitor = HealthMonitor(name=bare_name(item.name), type=monitor_type)
        monitor.interval = self._int(body, "interval", monitor.interval)
        monitor.timeout = self._int(body, "timeout", monitor.timeout)
        monitor.retry = self._int(body, "count", monitor.retry)
        monitor.send_string = self._str(body, "send", monitor.send_string)
        monitor.expected_status = self._str(body, "recv", monitor.expected_status)
        if monitor.send_string:
            host = HOST_HEADER_RE.search(monitor.send_string)
            if host:
                monitor.hostname = host.group(1)
        self.config.health_monitors.append(monitor)

    def _map_pool(self, item: Item) -> None:
        body = item.body
        pool = Pool(name=bare_name(item.name))
        if body.has("monitor"):
            names, relation = parse_monitor_expression(to_str(body.get("monitor")))
            pool.health_check_names = names
            pool.health_check_relation = relation
            pool.health_check = bool(names)
        pool.health_check_down_action = self._str(
            body, "service-down-action", pool.health_check_down_action
        )
        pool.load_balance_method = self._str(body, "load-balancing-mode", pool.load_balance_method)

        members = body.get("members")
        if isinstance(members, Block):
            entries = [(key, members.block(key) or Block()) for key in members]
        else:
            entries = [(key, Block()) for key in to_str_list(members)]
        for ordinal, (key, member_body) in enumerate(entries, start=1):
            pool.members.append(self._map_member(ordinal, key, member_body))
        self.config.pools.append(pool)

    def _map_member(self, ordinal: int, key: str, body: Block) -> PoolMember:
        endpoint = parse_member_key(key)
        member = PoolMember(id=ordinal, port=endpoint.port, service=endpoint.service)
        identifier = endpoint.address

        # Only an address-looking key identifier is replaced by the body address
        address = to_str(body.get("address"))
        if address and looks_numeric(identifier):
            identifier = address

        member.real_server_name = identifier or None
        member.weight = self._int(body, "ratio", member.weight)
        if _is_disabled(body):
            member.status = "disable"
        return member

    def _map_virtual(self, item: Item) -> None:
        body = item.body
        vs = VirtualServer(name=bare_name(item.name))
        if body.has("destination"):
            endpoint = parse_destination(to_str(body.get("destination")))
            vs.address, vs.port, vs.service = endpoint.address, endpoint.port, endpoint.service
        if body.has("disabled"):
            vs.status = "disable"
        for flag in VIRTUAL_TYPE_FLAGS:
            if body.has(flag):
                vs.type = flag
                break
        pool_name = self._str(body, "pool", None)
        vs.pool_name = bare_name(pool_name) or None
        vs.profiles = [bare_name(p) for p in self._list(body, "profiles", vs.profiles)]
        persist = self._list(body, "persist", [])
        if persist:
            vs.persistence = bare_name(persist[0])
        vs.rules = [bare_name(r) for r in self._list(body, "rules", vs.rules)]
        self.config.virtual_servers.append(vs)

    def _map_ssl_file(self, item: Item, file_type: str) -> None:
        """Merge ssl-cert and ssl-key objects that share a base name."""
        body = item.body
        name = bare_name(item.name)
        suffix = ".crt" if file_type == SSL_CERT_TYPE else ".key"
        if name.endswith(suffix):
            name = name[: -len(suffix)]
        path = self._str(body, "cache-path", None) or self._str(body, "source-path", None)

        cert = self.config.find_certificate(name)
        if cert is None:
            cert = Certificate(name=name)
            self.config.certificates.append(cert)
        if file_type == SSL_CERT_TYPE:
            cert.certificate_file = path or cert.certificate_file
        else:
            cert.key_file = path or cert.key_file
