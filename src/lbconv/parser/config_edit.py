"""Scanner for the ``config / edit / set / next / end`` dialect.

Turns a configuration dump into the generic Block tree:

    config load-balance pool        -> root.entries["load-balance pool"] (Block)
        edit "pool1"                -> Item("pool1") appended to that block
            set health-check enable -> item.body.entries["health-check"]
            config pool_member      -> nested Block inside the item
                edit 1 ... next
            end
        next
    end

``next`` and ``end`` both close the innermost open block; the scanner does
not tell them apart.
"""

import logging
import re

from lbconv.errors import UnterminatedBlockError
from lbconv.model.diagnostic import Diagnostic, Severity
from lbconv.parser.coerce import has_open_quote, split_tokens
from lbconv.parser.tree import Block, Item, Scalar, StringList

logger = logging.getLogger(__name__)

DIALECT_NAME = "config-edit"


class ConfigEditScanner:
    """Line scanner producing a Block tree from a config/edit dump."""

    CONFIG_RE = re.compile(r"^config\s+(.+?)\s*$", re.IGNORECASE)
    EDIT_RE = re.compile(r'^edit\s+(?:"((?:[^"\\]|\\.)*)"|(\S+))\s*$', re.IGNORECASE)
    SET_RE = re.compile(r"^set\s+(\S+)(?:\s+(.*?))?\s*$", re.IGNORECASE)
    APPEND_RE = re.compile(r"^append\s+(\S+)\s+(.*?)\s*$", re.IGNORECASE)
    UNSET_RE = re.compile(r"^unset\s+(\S+)\s*$", re.IGNORECASE)
    TERMINATOR_RE = re.compile(r"^(?:next|end)\s*$", re.IGNORECASE)
    # Example: #config-version=FADV1K-6.2.0-build0318-200520:opmode=0:vdom=0
    VERSION_RE = re.compile(r"^#config-version=(\S+)")

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []
        self.version: str | None = None
        self._lines: list[str] = []
        self._pos = 0

    def scan(self, text: str) -> Block:
        """Scan the full dump into a root Block.

        Args:
            text: Complete configuration text.

        Returns:
            Root Block whose entries are the top-level ``config`` sections.

        Raises:
            UnterminatedBlockError: A ``config`` or ``edit`` never closed.
        """
        self._lines = text.splitlines()
        self._pos = 0
        root = Block()
        self._parse_block(root, opener_line=0)
        return root

    def _parse_block(self, block: Block, opener_line: int) -> None:
        """Consume statements into ``block`` until its terminator.

        ``opener_line`` is 0 for the root, which is closed by end of input.
        """
        while self._pos < len(self._lines):
            raw = self._lines[self._pos]
            line_num = self._pos + 1
            self._pos += 1
            stripped = raw.strip()

            if not stripped:
                continue
            if stripped.startswith("#"):
                version_match = self.VERSION_RE.match(stripped)
                if version_match and self.version is None:
                    self.version = version_match.group(1)
                continue

            if self.TERMINATOR_RE.match(stripped):
                if opener_line:
                    return
                self._note(line_num, "Stray terminator at top level", stripped)
                continue

            config_match = self.CONFIG_RE.match(stripped)
            if config_match:
                path = " ".join(split_tokens(config_match.group(1)))
                nested = block.block(path)
                if nested is None:
                    nested = Block(line_number=line_num)
                    block.entries[path] = nested
                self._parse_block(nested, opener_line=line_num)
                continue

            edit_match = self.EDIT_RE.match(stripped)
            if edit_match:
                quoted, bare = edit_match.groups()
                name = quoted.replace('\\"', '"') if quoted is not None else bare
                item = Item(name=name, body=Block(line_number=line_num), line_number=line_num)
                block.items.append(item)
                self._parse_block(item.body, opener_line=line_num)
                continue

            set_match = self.SET_RE.match(stripped)
            if set_match:
                key, value = set_match.groups()
                value = self._join_quoted(value or "", line_num)
                block.entries[key] = self._value_node(value, line_num)
                continue

            unset_match = self.UNSET_RE.match(stripped)
            if unset_match:
                block.entries[unset_match.group(1)] = Scalar(None, line_num)
                continue

            append_match = self.APPEND_RE.match(stripped)
            if append_match:
                key, value = append_match.groups()
                self._append(block, key, self._join_quoted(value, line_num), line_num)
                continue

            self._note(line_num, "Unrecognized statement skipped", stripped)

        if opener_line:
            raise UnterminatedBlockError(
                "Block opened here was never closed with 'next' or 'end'",
                line_number=opener_line,
                dialect=DIALECT_NAME,
            )

    def _join_quoted(self, value: str, line_num: int) -> str:
        """Pull in following lines while a quoted value is still open.

        Multi-line values such as PEM bodies keep their line breaks; a
        ``next`` or ``end`` line inside the quotes is part of the value.
        """
        while has_open_quote(value):
            if self._pos >= len(self._lines):
                self._note(line_num, "Quoted value never closed", value.splitlines()[0])
                break
            value = f"{value}\n{self._lines[self._pos].rstrip()}"
            self._pos += 1
        return value

    @staticmethod
    def _value_node(value: str, line_num: int) -> Scalar | StringList:
        tokens = split_tokens(value)
        if not tokens:
            return Scalar("", line_num)
        if len(tokens) == 1:
            return Scalar(tokens[0], line_num)
        return StringList(tokens, line_num)

    @staticmethod
    def _append(block: Block, key: str, value: str, line_num: int) -> None:
        """``append`` extends an existing value instead of replacing it."""
        existing = block.get(key)
        values: list[str] = []
        if isinstance(existing, StringList):
            values = list(existing.values)
        elif isinstance(existing, Scalar) and existing.value:
            values = [existing.value]
        values.extend(split_tokens(value))
        block.entries[key] = StringList(values, line_num)

    def _note(self, line_num: int, message: str, excerpt: str) -> None:
        logger.debug("line %d: %s: %s", line_num, message, excerpt)
        self.diagnostics.append(Diagnostic(Severity.WARNING, message, line_num, excerpt))
