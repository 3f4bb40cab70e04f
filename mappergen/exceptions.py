"""
Typed exceptions for the mapper generator.

Hierarchy:

    MapperGenError (base)
    |
    +-- ConfigurationError   (malformed config, relation syntax, bad alias)
    +-- TypeResolutionError  (type path, declaring file or struct body not found)
    +-- ExportError          (output or plan dump could not be written)

Fields that cannot be mapped are not errors: they are recorded in the
mapping plan and rendered as comments.
"""
from typing import Optional


class MapperGenError(Exception):
    """Base class for every fatal generator error."""

    code: str = "MAPPERGEN_ERROR"


class ConfigurationError(MapperGenError, ValueError):
    """The mapping configuration itself is invalid."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, mapper: Optional[str] = None):
        self.mapper = mapper
        if mapper:
            message = f"mapper {mapper}: {message}"
        super().__init__(message)


class TypeResolutionError(MapperGenError, LookupError):
    """A referenced record type could not be located or has no struct body."""

    code = "TYPE_RESOLUTION_ERROR"

    def __init__(self, message: str, type_path: Optional[str] = None):
        self.type_path = type_path
        super().__init__(message)


class ExportError(MapperGenError, OSError):
    """Generated output or the plan dump could not be written."""

    code = "EXPORT_ERROR"
