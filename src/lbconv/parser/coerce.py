"""Value coercion helpers.

Converts raw tree nodes into booleans, integers, string lists and
address/port pairs. None of these helpers raise on bad input: anything
unparsable falls back to the type's empty value.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass

from lbconv.parser.tree import Block, Node, Scalar, StringList

CONFIG_EDIT_TRUTHY = frozenset({"enable", "true", "1", "yes"})
BRACE_TRUTHY = frozenset({"enabled", "true", "1", "yes"})

# Tokens meaning "no limit"; they count as 0
INTEGER_SENTINELS = frozenset({"infinite", "indefinite"})

# Double-quoted string (with \" escapes) or a bare run of non-space
TOKEN_RE = re.compile(r'"((?:[^"\\]|\\.)*)"|(\S+)')
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
DOTTED_V4_PORT_RE = re.compile(r"^(\d{1,3}(?:\.\d{1,3}){3}(?:%\d+)?)\.([^.]+)$")


@dataclass(frozen=True)
class AddressPort:
    """An address with either a numeric port or a service-name alias."""

    address: str = ""
    port: int = 0
    service: str | None = None


def split_tokens(text: str) -> list[str]:
    """Split a value into tokens, unquoting double-quoted ones."""
    tokens = []
    for match in TOKEN_RE.finditer(text):
        quoted, bare = match.groups()
        if quoted is not None:
            tokens.append(quoted.replace('\\"', '"').replace("\\\\", "\\"))
        else:
            tokens.append(bare)
    return tokens


def has_open_quote(text: str) -> bool:
    """True when ``text`` has an odd number of unescaped double quotes."""
    open_quote = False
    escaped = False
    for char in text:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            open_quote = not open_quote
    return open_quote


def unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1].replace('\\"', '"')
    return text


def to_str(node: Node | None) -> str | None:
    """Get the text of a scalar or list node."""
    if isinstance(node, Scalar):
        return node.value
    if isinstance(node, StringList):
        return " ".join(node.values)
    return None


def to_bool(node: Node | None, truthy: frozenset[str]) -> bool:
    """True iff the node's text is in the dialect's truthy set."""
    value = to_str(node)
    if value is None:
        return False
    return value.strip().lower() in truthy


def to_int(node: Node | str | None) -> int:
    """Parse the leading integer; sentinels and garbage become 0."""
    value = node if isinstance(node, str) else to_str(node)
    if value is None:
        return 0
    value = value.strip()
    if value.lower() in INTEGER_SENTINELS:
        return 0
    match = LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else 0


def to_str_list(node: Node | None) -> list[str]:
    """Flatten a node into non-blank tokens.

    Accepts whitespace separated text, a ``{ a b c }`` bracketed list,
    a StringList, or a Block (its keys, then its item names).
    """
    if node is None:
        return []
    if isinstance(node, StringList):
        return [v for v in node.values if v.strip()]
    if isinstance(node, Block):
        return [k for k in node.entries if k.strip()] + [i.name for i in node.items if i.name.strip()]
    if node.value is None:
        return []
    text = node.value.strip()
    if text.startswith("{") and text.endswith("}"):
        text = text[1:-1]
    return [t for t in split_tokens(text) if t.strip()]


def bare_name(name: str | None) -> str:
    """Drop the partition path from ``/Partition/Name``."""
    if not name:
        return ""
    return name.strip().rstrip("/").rsplit("/", 1)[-1]


def split_port(token: str) -> tuple[int, str | None]:
    """Split a port token into ``(port, service)``.

    Pure digits and ``any`` are numeric ports (``any`` is 0). Every other
    token is a service-name alias and is never converted to a number.
    """
    token = token.strip()
    if token.isdecimal():
        return int(token), None
    if token.lower() == "any":
        return 0, None
    if not token:
        return 0, None
    return 0, token


def parse_destination(text: str | None) -> AddressPort:
    """Parse a brace-dialect destination into address and port.

    Accepted shapes, after dropping any partition prefix:
        2001:db8::1.443    IPv6 address, dot before the port
        10.0.0.5:https     IPv4 address or name, colon before the port
        10.0.0.5.443       dotted IPv4, dot before the port
        https              bare service name, no address
    """
    if not text:
        return AddressPort()
    value = bare_name(unquote(text))

    if value.count(":") > 1:
        address, sep, port_token = value.rpartition(".")
        if not sep:
            return AddressPort(address=value)
        port, service = split_port(port_token)
        return AddressPort(address, port, service)

    if ":" in value:
        address, _, port_token = value.partition(":")
        port, service = split_port(port_token)
        return AddressPort(address, port, service)

    match = DOTTED_V4_PORT_RE.match(value)
    if match:
        port, service = split_port(match.group(2))
        return AddressPort(match.group(1), port, service)

    port, service = split_port(value)
    return AddressPort("", port, service)


def parse_member_key(key: str) -> AddressPort:
    """Parse a pool member key ``<address-or-node>:<port-or-service>``."""
    return parse_destination(key)


def looks_numeric(identifier: str) -> bool:
    """Guess whether a key-derived identifier is an address rather than a name."""
    if not identifier:
        return False
    if identifier[0].isdigit():
        return True
    try:
        ipaddress.ip_address(identifier.split("%", 1)[0])
    except ValueError:
        return False
    return True
