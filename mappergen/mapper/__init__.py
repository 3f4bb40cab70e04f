"""
Structural Mapping Module

Decides, for every destination field, whether and how it is populated:
- Compatibility matching of field shapes
- Automatic resolution by field name (last source wins)
- Manual relations overriding automatic rules
- Plan assembly in destination field order
"""

from .auto_resolver import AutomaticResolver
from .mapping import FieldMappingRule, HelperRequirement, MappingPlan, MappingSpec
from .matcher import MatchResult, match
from .planner import MappingPlanner
from .relations import Relation, RelationOverrider, parse_relation

__all__ = [
    "AutomaticResolver",
    "FieldMappingRule",
    "HelperRequirement",
    "MappingPlan",
    "MappingSpec",
    "MatchResult",
    "match",
    "MappingPlanner",
    "Relation",
    "RelationOverrider",
    "parse_relation",
]
