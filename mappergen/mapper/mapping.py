"""Mapping plan model."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from mappergen.schema.config_models import RawRelation
from mappergen.schema.models import SourceBinding


def title(type_name: str) -> str:
    """Upper-case the first letter (``int64`` -> ``Int64``)."""
    return type_name[:1].upper() + type_name[1:]


@dataclass(frozen=True, order=True)
class HelperRequirement:
    """A generated helper function a conversion expression calls."""

    name: str
    kind: str  # "pointer" or "slice"
    source_type: str
    target_type: str
    source_ptr: bool = False
    target_ptr: bool = False

    @classmethod
    def pointer(cls, type_name: str) -> "HelperRequirement":
        """``<T>Ptr(src T) *T``."""
        return cls(
            name=f"{type_name}Ptr",
            kind="pointer",
            source_type=type_name,
            target_type=type_name,
        )

    @classmethod
    def slice(
        cls, source_type: str, target_type: str, source_ptr: bool, target_ptr: bool
    ) -> "HelperRequirement":
        """Element-wise converter, e.g. ``int32ArrToInt64PtrArr``."""
        name = (
            f"{source_type}{'Ptr' if source_ptr else ''}"
            f"ArrTo{title(target_type)}{'Ptr' if target_ptr else ''}Arr"
        )
        return cls(
            name=name,
            kind="slice",
            source_type=source_type,
            target_type=target_type,
            source_ptr=source_ptr,
            target_ptr=target_ptr,
        )

    def dependencies(self) -> Tuple["HelperRequirement", ...]:
        """Helpers this helper calls itself."""
        if self.kind == "slice" and self.target_ptr:
            return (HelperRequirement.pointer(self.target_type),)
        return ()


@dataclass(frozen=True)
class FieldMappingRule:
    """Resolved output for one destination field."""

    dest_field: str
    resolved: bool
    expression: str = ""
    source_alias: str = ""
    source_field: str = ""
    source_is_pointer: bool = False
    manual: bool = False
    ambiguous: bool = False
    reason: str = ""
    helpers: Tuple[HelperRequirement, ...] = ()

    @property
    def has_provenance(self) -> bool:
        return bool(self.source_alias and self.source_field)

    @property
    def source_reference(self) -> str:
        """``alias.Field`` of the contributing source field, if known."""
        if not self.has_provenance:
            return ""
        return f"{self.source_alias}.{self.source_field}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "dest_field": self.dest_field,
            "resolved": self.resolved,
            "expression": self.expression,
            "source_alias": self.source_alias,
            "source_field": self.source_field,
            "source_is_pointer": self.source_is_pointer,
            "manual": self.manual,
            "ambiguous": self.ambiguous,
            "reason": self.reason,
            "helpers": [h.name for h in self.helpers],
        }


@dataclass
class MappingSpec:
    """One configured mapper with its types already resolved."""

    mapper_name: str
    list_mapper_name: str
    destination: SourceBinding
    sources: List[SourceBinding]
    relations: List[RawRelation] = field(default_factory=list)


@dataclass
class MappingPlan:
    """Resolved rules for one mapper, in destination field order."""

    spec: MappingSpec
    rules: List[FieldMappingRule] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def resolved_rules(self) -> List[FieldMappingRule]:
        return [rule for rule in self.rules if rule.resolved]

    @property
    def unresolved(self) -> List[str]:
        """Destination fields no source or relation could populate."""
        return [rule.dest_field for rule in self.rules if not rule.resolved]

    def get_rule(self, dest_field: str) -> Optional[FieldMappingRule]:
        for rule in self.rules:
            if rule.dest_field == dest_field:
                return rule
        return None

    def rules_for_source(self, alias: str) -> List[FieldMappingRule]:
        """Resolved rules whose provenance is the given source alias."""
        return [
            rule
            for rule in self.rules
            if rule.resolved and rule.has_provenance and rule.source_alias == alias
        ]

    def unattributed_rules(self) -> List[FieldMappingRule]:
        """Resolved rules with no recognizable source field."""
        return [rule for rule in self.rules if rule.resolved and not rule.has_provenance]

    @property
    def helpers(self) -> Set[HelperRequirement]:
        """Helpers needed by resolved rules, including transitive ones."""
        required: Set[HelperRequirement] = set()
        for rule in self.resolved_rules:
            for helper in rule.helpers:
                required.add(helper)
                required.update(helper.dependencies())
        return required

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "mapper": self.spec.mapper_name,
            "list_mapper": self.spec.list_mapper_name,
            "destination": {
                "alias": self.spec.destination.alias,
                "type": self.spec.destination.struct.to_dict(),
            },
            "sources": [
                {"alias": b.alias, "position": b.position, "type": b.struct.to_dict()}
                for b in self.spec.sources
            ],
            "rules": [rule.to_dict() for rule in self.rules],
            "unresolved": self.unresolved,
            "warnings": list(self.warnings),
        }
