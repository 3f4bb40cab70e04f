"""Dataclasses for the declarative mapper configuration."""
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


@dataclass
class TypeReference:
    """An ``{alias, path}`` entry naming a record type."""

    alias: str
    path: str

    @property
    def type_name(self) -> str:
        """Final dotted segment of the path."""
        return self.path.rsplit(".", 1)[-1]


@dataclass
class ImportEntry:
    """Extra import to add to the generated file."""

    path: str
    alias: str = ""


@dataclass
class RelationEntry:
    """Structured relation with an explicitly declared nil guard."""

    field: str
    expr: str
    guard: Optional[str] = None


RawRelation = Union[str, RelationEntry]


@dataclass
class MapperConfig:
    """One configured mapper."""

    destination: TypeReference
    sources: List[TypeReference]
    alias: str = ""
    mapping: List[Any] = field(default_factory=list)
    relations: List[RawRelation] = field(default_factory=list)

    @property
    def prefix(self) -> str:
        return self.alias or self.destination.type_name

    def mapper_name(self) -> str:
        return f"{self.prefix}Mapper"

    def list_mapper_name(self) -> str:
        return f"{self.prefix}ListMapper"


@dataclass
class MappersConfig:
    """Complete configuration file."""

    path: str
    imports: List[ImportEntry] = field(default_factory=list)
    mappers: List[MapperConfig] = field(default_factory=list)
