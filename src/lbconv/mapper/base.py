"""Base Mapper Interface."""

import logging
from abc import ABC, abstractmethod

from lbconv.model.config import Configuration
from lbconv.model.diagnostic import Severity
from lbconv.parser.coerce import split_port, to_bool, to_int, to_str, to_str_list
from lbconv.parser.tree import Block, Item

logger = logging.getLogger(__name__)


class BaseMapper(ABC):
    """Walks a scanned Block tree and appends typed entities.

    Entities are constructed with their declared defaults first. The
    field helpers below return ``current`` when a key is absent, so only
    keys present in the source overwrite a default.
    """

    truthy: frozenset[str] = frozenset()

    def __init__(self, config: Configuration) -> None:
        self.config = config

    @abstractmethod
    def map(self, root: Block) -> Configuration:
        """Append every recognised entity found under ``root``."""

    def _str(self, block: Block, key: str, current: str | None) -> str | None:
        if not block.has(key):
            return current
        value = to_str(block.get(key))
        return current if value is None else value

    def _int(self, block: Block, key: str, current: int) -> int:
        if not block.has(key):
            return current
        return to_int(block.get(key))

    def _bool(self, block: Block, key: str, current: bool) -> bool:
        if not block.has(key):
            return current
        return to_bool(block.get(key), self.truthy)

    def _list(self, block: Block, key: str, current: list[str]) -> list[str]:
        if not block.has(key):
            return current
        return to_str_list(block.get(key))

    def _port(self, block: Block, key: str, current: tuple[int, str | None]) -> tuple[int, str | None]:
        if not block.has(key):
            return current
        return split_port(to_str(block.get(key)) or "")

    def _check_duplicate(self, seen: set[str], kind: str, name: str, item: Item) -> None:
        """Record a diagnostic when a name repeats inside one collection."""
        if name in seen:
            logger.warning("Duplicate %s '%s' at line %d", kind, name, item.line_number)
            self.config.add_diagnostic(
                f"Duplicate {kind} name '{name}'; references resolve to the first definition",
                line_number=item.line_number,
                severity=Severity.WARNING,
            )
        seen.add(name)
