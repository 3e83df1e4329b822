"""Generic block tree shared by both scanners.

Scanners never build entities. They reduce raw text to this small tagged
tree and the mappers walk it per object kind:

    Block
      entries: key -> Scalar | StringList | Block
      items:   ordered Item(name, Block) list (``edit`` items, named objects)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union


@dataclass
class Scalar:
    """A single value. ``None`` means explicitly unset (``unset`` / ``none``)."""

    value: str | None
    line_number: int = 0


@dataclass
class StringList:
    """An ordered list of bare tokens."""

    values: list[str] = field(default_factory=list)
    line_number: int = 0


@dataclass
class Block:
    """A nested block of keyed nodes plus its repeated named items."""

    entries: dict[str, "Node"] = field(default_factory=dict)
    items: list["Item"] = field(default_factory=list)
    line_number: int = 0

    def get(self, key: str) -> "Node | None":
        return self.entries.get(key)

    def block(self, key: str) -> "Block | None":
        """Return the nested block stored under ``key``, if it is one."""
        node = self.entries.get(key)
        return node if isinstance(node, Block) else None

    def section(self, path: str) -> list["Item"]:
        """Items of the nested block at ``path`` (empty when absent)."""
        nested = self.block(path)
        return nested.items if nested is not None else []

    def has(self, key: str) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)


@dataclass
class Item:
    """A repeated named item: an ``edit`` entry or a named brace object."""

    name: str
    body: Block
    line_number: int = 0


Node = Union[Scalar, StringList, Block]
