"""Mapper package - Turns scanned Block trees into typed entities."""

from lbconv.mapper.base import BaseMapper
from lbconv.mapper.brace import BraceMapper
from lbconv.mapper.config_edit import ConfigEditMapper

__all__ = ["BaseMapper", "BraceMapper", "ConfigEditMapper"]
