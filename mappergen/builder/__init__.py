"""
Code Builder Module

Renders resolved mapping plans into Go source with:
- Field statements (plain, nil-guarded, commented-out)
- Pointer constructor and slice conversion helpers
- Single-record and list mappers
"""

from .code_builder import GoCodeBuilder, FileConfig
from .field_builder import FieldBuilder
from .template_engine import TemplateEngine

__all__ = [
    "GoCodeBuilder",
    "FileConfig",
    "FieldBuilder",
    "TemplateEngine",
]
