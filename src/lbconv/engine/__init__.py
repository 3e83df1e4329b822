"""Engine package - Post-parse processing over the configuration graph."""

from lbconv.engine.resolver import ReferenceResolver, resolve_references

__all__ = ["ReferenceResolver", "resolve_references"]
