"""Scanner for the brace-delimited dialect.

Top-level objects look like::

    ltm pool /Common/web_pool {
        members {
            /Common/web1:80 {
                address 10.0.0.11
            }
        }
        monitor /Common/http and /Common/tcp
    }

Each object's extent is found by counting braces across lines, so rule
bodies full of nested braces never close an object early. Skipped objects
are counted the way Tcl reads a braced word: every unescaped brace counts,
quotes included. Parsed objects honour double quotes, and a quoted string
may run over several lines.

Objects whose type path is not recognised are skipped without being
interpreted; the rest are tokenized into the same Block tree as the
config/edit dialect and stored as named items under their type path.
"""

import logging
import re
from dataclasses import dataclass

from lbconv.errors import UnterminatedBlockError
from lbconv.model.diagnostic import Diagnostic, Severity
from lbconv.parser.tree import Block, Item, Scalar, StringList

logger = logging.getLogger(__name__)

DIALECT_NAME = "brace"

RECOGNIZED_TYPES = frozenset(
    {
        "ltm node",
        "ltm pool",
        "ltm virtual",
        "sys file ssl-cert",
        "sys file ssl-key",
    }
)
MONITOR_TYPE_PREFIX = "ltm monitor "


@dataclass
class Token:
    """A lexical token inside an object body."""

    kind: str  # word, open, close, eol
    text: str
    line_number: int
    quoted: bool = False


def is_recognized(type_path: str) -> bool:
    """Check whether an object header is parsed rather than skipped."""
    if type_path in RECOGNIZED_TYPES:
        return True
    return type_path.startswith(MONITOR_TYPE_PREFIX) and len(type_path) > len(MONITOR_TYPE_PREFIX)


def brace_delta(line: str) -> int:
    """Net ``{`` minus ``}`` on a line, ignoring only backslash-escaped braces."""
    delta, _ = quoted_brace_delta(line, in_quote=False, honor_quotes=False)
    return delta


def quoted_brace_delta(line: str, in_quote: bool = False, honor_quotes: bool = True) -> tuple[int, bool]:
    """Net brace count of a line and whether a quoted string is still open.

    ``in_quote`` carries the state over from the previous line.
    """
    depth = 0
    escaped = False
    for char in line:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"' and honor_quotes:
            in_quote = not in_quote
        elif in_quote:
            continue
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
    return depth, in_quote


class BraceScanner:
    """Line scanner producing a Block tree from a brace-delimited dump."""

    # Example: ltm monitor http /Common/http_head_f5 {
    HEADER_RE = re.compile(
        r'^(?P<path>[a-z][\w-]*(?:\s+[a-z][\w-]*)*)\s+(?P<name>"[^"]*"|[^\s{}]+)\s*\{(?P<rest>.*)$'
    )
    # Example: #TMSH-VERSION: 15.1.8
    VERSION_RE = re.compile(r"^#TMSH-VERSION:\s*(\S+)", re.IGNORECASE)
    BODY_TOKEN_RE = re.compile(r'"((?:[^"\\]|\\.)*)"|([{}])|(\n)|((?:\\.|[^\s{}"])+)')

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []
        self.version: str | None = None
        self.skipped: dict[str, int] = {}
        self._lines: list[str] = []

    def scan(self, text: str) -> Block:
        """Scan the full dump into a root Block.

        Args:
            text: Complete configuration text.

        Returns:
            Root Block with one nested Block per recognised type path,
            each holding the objects of that type as named items.

        Raises:
            UnterminatedBlockError: An object's braces never balanced.
        """
        self._lines = text.splitlines()
        root = Block()
        i = 0
        while i < len(self._lines):
            stripped = self._lines[i].strip()
            line_num = i + 1

            if not stripped:
                i += 1
                continue
            if stripped.startswith("#"):
                version_match = self.VERSION_RE.match(stripped)
                if version_match and self.version is None:
                    self.version = version_match.group(1)
                i += 1
                continue

            header = self.HEADER_RE.match(stripped)
            if not header:
                if brace_delta(stripped) > 0:
                    end = self._find_end(i)
                    self._note(line_num, "Unrecognized block skipped", stripped)
                    i = end + 1
                else:
                    self._note(line_num, "Unrecognized statement skipped", stripped)
                    i += 1
                continue

            type_path = " ".join(header.group("path").split())
            name = header.group("name").strip('"')
            recognized = is_recognized(type_path)
            end = self._find_end(i, honor_quotes=recognized)

            if recognized:
                body = self._parse_object(header.group("rest"), i, end)
                section = root.block(type_path)
                if section is None:
                    section = Block(line_number=line_num)
                    root.entries[type_path] = section
                section.items.append(Item(name=name, body=body, line_number=line_num))
            else:
                self.skipped[type_path] = self.skipped.get(type_path, 0) + 1
                logger.debug("line %d: skipping %s %s (%d lines)", line_num, type_path, name, end - i + 1)

            i = end + 1
        return root

    def _find_end(self, start: int, honor_quotes: bool = False) -> int:
        """Index of the line where the block opened at ``start`` closes.

        Content is only counted, never interpreted. Without ``honor_quotes``
        every unescaped brace counts, as inside a Tcl braced word.
        """
        depth, in_quote = quoted_brace_delta(self._lines[start], honor_quotes=honor_quotes)
        i = start
        while depth > 0:
            i += 1
            if i >= len(self._lines):
                raise UnterminatedBlockError(
                    f"Block '{self._lines[start].strip()}' has no matching '}}'",
                    line_number=start + 1,
                    dialect=DIALECT_NAME,
                )
            delta, in_quote = quoted_brace_delta(self._lines[i], in_quote, honor_quotes)
            depth += delta
        return i

    def _parse_object(self, rest: str, start: int, end: int) -> Block:
        """Parse the body of one object spanning ``start``..``end``."""
        text = "\n".join([rest] + self._lines[start + 1 : end + 1])
        tokens = self._tokenize(text, start + 1)
        body = Block(line_number=start + 1)
        self._parse_body(tokens, 0, body, start + 1)
        return body

    def _tokenize(self, text: str, line_num: int) -> list[Token]:
        """Tokenize object text; quoted words may span lines."""
        tokens = []
        for match in self.BODY_TOKEN_RE.finditer(text):
            quoted, brace, newline, bare = match.groups()
            if quoted is not None:
                tokens.append(Token("word", quoted.replace('\\"', '"'), line_num, quoted=True))
                line_num += quoted.count("\n")
            elif newline:
                tokens.append(Token("eol", "", line_num))
                line_num += 1
            elif brace == "{":
                tokens.append(Token("open", brace, line_num))
            elif brace == "}":
                tokens.append(Token("close", brace, line_num))
            else:
                tokens.append(Token("word", bare, line_num))
        tokens.append(Token("eol", "", line_num))
        return tokens

    def _parse_body(self, tokens: list[Token], pos: int, block: Block, opener_line: int) -> int:
        """Parse statements into ``block`` up to its closing brace.

        Returns:
            Position just past the closing brace.
        """
        while pos < len(tokens):
            token = tokens[pos]
            if token.kind == "eol":
                pos += 1
                continue
            if token.kind == "close":
                return pos + 1
            if token.kind == "open":
                # Anonymous block, nothing to key it by
                pos = self._parse_body(tokens, pos + 1, Block(), token.line_number)
                continue

            key = token.text
            pos += 1
            values: list[Token] = []
            while pos < len(tokens) and tokens[pos].kind == "word":
                values.append(tokens[pos])
                pos += 1

            if pos < len(tokens) and tokens[pos].kind == "open":
                if values:
                    # e.g. monitor min 1 of { /Common/http /Common/tcp }
                    inner, pos = self._raw_braced(tokens, pos, token.line_number)
                    text = " ".join([v.text for v in values] + ["{"] + inner + ["}"])
                    block.entries[key] = Scalar(text, token.line_number)
                elif self._is_inline_list(tokens, pos):
                    words, pos = self._raw_braced(tokens, pos, token.line_number)
                    block.entries[key] = StringList(words, token.line_number)
                else:
                    nested = Block(line_number=token.line_number)
                    pos = self._parse_body(tokens, pos + 1, nested, token.line_number)
                    block.entries[key] = nested
            elif not values:
                block.entries[key] = Scalar("", token.line_number)
            elif len(values) == 1 and values[0].text == "none" and not values[0].quoted:
                block.entries[key] = Scalar(None, token.line_number)
            else:
                block.entries[key] = Scalar(" ".join(v.text for v in values), token.line_number)

        raise UnterminatedBlockError(
            "Nested block has no matching '}'", line_number=opener_line, dialect=DIALECT_NAME
        )

    @staticmethod
    def _is_inline_list(tokens: list[Token], pos: int) -> bool:
        """``{ a b c }`` with only words, all on the opening line."""
        words = 0
        for token in tokens[pos + 1:]:
            if token.kind == "close":
                return words > 0
            if token.kind != "word":
                return False
            words += 1
        return False

    @staticmethod
    def _raw_braced(tokens: list[Token], pos: int, opener_line: int) -> tuple[list[str], int]:
        """Collect word texts from the ``{`` at ``pos`` to its match."""
        depth = 0
        words: list[str] = []
        while pos < len(tokens):
            token = tokens[pos]
            pos += 1
            if token.kind == "open":
                depth += 1
                if depth > 1:
                    words.append("{")
            elif token.kind == "close":
                depth -= 1
                if depth == 0:
                    return words, pos
                words.append("}")
            elif token.kind == "word":
                words.append(token.text)
        raise UnterminatedBlockError(
            "Inline list has no matching '}'", line_number=opener_line, dialect=DIALECT_NAME
        )

    def _note(self, line_num: int, message: str, excerpt: str) -> None:
        logger.debug("line %d: %s: %s", line_num, message, excerpt)
        self.diagnostics.append(Diagnostic(Severity.WARNING, message, line_num, excerpt))
