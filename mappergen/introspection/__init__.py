"""
Type Introspection Module

Resolves configured type paths into struct descriptors:
- Go source lookup relative to the configuration file or under GOPATH
- Import path discovery through go.mod
- Per-run import alias registry
- Parsed file caching
"""

from .alias_registry import ImportAliasRegistry
from .type_resolver import TypeResolver

__all__ = [
    "ImportAliasRegistry",
    "TypeResolver",
]
