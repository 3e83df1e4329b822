"""Shared parse pipeline.

Public API:
    detect_dialect(text) -> Dialect
    parse_config(text, dialect) -> Configuration
    load_config(path, dialect) -> Configuration

Flow: text -> scanner -> Block tree -> mapper -> resolver -> Configuration.
"""

import datetime
import logging
import re
from pathlib import Path

from lbconv.config import Settings
from lbconv.engine.resolver import resolve_references
from lbconv.errors import ConfigSourceError, DialectDetectionError
from lbconv.mapper.brace import BraceMapper
from lbconv.mapper.config_edit import ConfigEditMapper
from lbconv.model.config import Configuration, Dialect
from lbconv.parser.brace import BraceScanner
from lbconv.parser.config_edit import ConfigEditScanner

logger = logging.getLogger(__name__)

# How many meaningful lines detection looks at before giving up
DETECTION_WINDOW = 50

CONFIG_EDIT_HINT_RE = re.compile(r"^(?:config\s+\S|#config-version=)", re.IGNORECASE)
BRACE_HINT_RE = re.compile(r"^(?:#TMSH-VERSION:|[a-z][\w-]*\s+[^{}]*\{)", re.IGNORECASE)


def detect_dialect(text: str) -> Dialect:
    """Guess the dialect from the first meaningful lines.

    Raises:
        DialectDetectionError: Neither dialect's statements were seen.
    """
    seen = 0
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if CONFIG_EDIT_HINT_RE.match(stripped):
            return Dialect.CONFIG_EDIT
        if BRACE_HINT_RE.match(stripped):
            return Dialect.BRACE
        seen += 1
        if seen >= DETECTION_WINDOW:
            break
    raise DialectDetectionError("Could not detect configuration dialect")


def _resolve_dialect(text: str, dialect: Dialect | str | None, settings: Settings) -> Dialect:
    if isinstance(dialect, Dialect):
        return dialect
    requested = dialect or settings.default_dialect
    if requested == "auto":
        return detect_dialect(text)
    try:
        return Dialect(requested)
    except ValueError:
        raise DialectDetectionError(f"Unknown dialect '{requested}'") from None


def parse_config(
    text: str,
    dialect: Dialect | str | None = None,
    settings: Settings | None = None,
) -> Configuration:
    """Parse configuration text into a fully resolved Configuration.

    Args:
        text: Complete configuration dump.
        dialect: A Dialect, its value, "auto", or None for the settings default.
        settings: Parser settings; defaults when omitted.

    Returns:
        Configuration with all references resolved.

    Raises:
        ConfigSourceError: The text is empty.
        DialectDetectionError: The dialect could not be determined.
        UnterminatedBlockError: A block never found its terminator.
    """
    if text is None or not text.strip():
        raise ConfigSourceError("Configuration text is empty")
    settings = settings or Settings()
    chosen = _resolve_dialect(text, dialect, settings)

    config = Configuration(
        metadata={
            "vendor": settings.vendor_for(chosen.value),
            "dialect": chosen.value,
            "parsed_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }
    )

    # Phase 1: scan and map every entity
    if chosen is Dialect.CONFIG_EDIT:
        scanner = ConfigEditScanner()
        root = scanner.scan(text)
        mapper = ConfigEditMapper(config)
    else:
        scanner = BraceScanner()
        root = scanner.scan(text)
        config.metadata["skipped_objects"] = dict(scanner.skipped)
        mapper = BraceMapper(config)

    if scanner.version:
        config.metadata["version"] = scanner.version
    for diagnostic in scanner.diagnostics:
        config.add_diagnostic(diagnostic.message, diagnostic.line_number, diagnostic.excerpt, diagnostic.severity)
    mapper.map(root)

    # Phase 2: link by name
    resolve_references(config)

    dangling = config.unresolved_references()
    if dangling:
        logger.info("%d unresolved reference(s)", len(dangling))
    return config


def load_config(
    path: str | Path,
    dialect: Dialect | str | None = None,
    settings: Settings | None = None,
) -> Configuration:
    """Read a configuration file and parse it.

    Raises:
        ConfigSourceError: The file cannot be read or is empty.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ConfigSourceError(f"Cannot read configuration file {path}: {e}") from e

    config = parse_config(text, dialect=dialect, settings=settings)
    config.metadata["source"] = str(path)
    return config
