"""Parser package - Converts raw configuration text into a generic Block tree.

Scanners do NOT build entities - they structure text for the mappers.
"""

from lbconv.parser.brace import BraceScanner
from lbconv.parser.config_edit import ConfigEditScanner
from lbconv.parser.tree import Block, Item, Node, Scalar, StringList

__all__ = [
    "Block",
    "BraceScanner",
    "ConfigEditScanner",
    "Item",
    "Node",
    "Scalar",
    "StringList",
]
