"""Abstract base class for type declaration parsers."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from mappergen.schema.models import FieldDescriptor


@dataclass
class TypeDeclaration:
    """A named type found in a source file."""

    name: str
    kind: str  # "struct", "alias", "defined", "generic"
    fields: Tuple[FieldDescriptor, ...] = field(default_factory=tuple)
    underlying: str = ""

    @property
    def is_struct(self) -> bool:
        return self.kind == "struct"


@dataclass
class ParsedSource:
    """Declarations extracted from one source file."""

    package: str = ""
    declarations: Dict[str, TypeDeclaration] = field(default_factory=dict)

    def get(self, name: str) -> Optional[TypeDeclaration]:
        return self.declarations.get(name)


class DeclarationParser(ABC):
    """Abstract base class for source declaration parsers."""

    @abstractmethod
    def parse(self, content: str) -> ParsedSource:
        """
        Parse source content and return its type declarations.

        Args:
            content: Raw source file content

        Returns:
            ParsedSource: Package name and declarations
        """
        pass

    @staticmethod
    def detect_format(file_path: str) -> str:
        """Detect file format from extension."""
        ext = file_path.lower().split('.')[-1]
        return ext
