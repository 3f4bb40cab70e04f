"""Assembles the mapping plan for one configured mapper."""
import logging
from typing import List, Optional

from mappergen.mapper.auto_resolver import AutomaticResolver
from mappergen.mapper.mapping import MappingPlan, MappingSpec
from mappergen.mapper.relations import Relation, RelationOverrider, parse_relation

logger = logging.getLogger(__name__)


class MappingPlanner:
    """
    Runs automatic resolution, then applies manual relations.

    Usage:
    ```python
    planner = MappingPlanner()
    plan = planner.plan(spec)
    for rule in plan.rules:
        print(rule.dest_field, rule.expression if rule.resolved else "-")
    ```
    """

    def __init__(
        self,
        resolver: Optional[AutomaticResolver] = None,
        overrider: Optional[RelationOverrider] = None,
    ):
        self.resolver = resolver or AutomaticResolver()
        self.overrider = overrider or RelationOverrider()

    def plan(self, spec: MappingSpec) -> MappingPlan:
        """
        Build the plan for ``spec``.

        Relations are parsed before any resolution so a malformed relation
        aborts the run before any work is done.

        Raises:
            ConfigurationError: For malformed relations or relations naming
                unknown destination fields
        """
        relations: List[Relation] = [parse_relation(raw) for raw in spec.relations]

        rules = self.resolver.resolve(spec.destination.struct, spec.sources)

        warnings: List[str] = []
        rules = self.overrider.apply(
            rules,
            relations,
            spec.sources,
            destination=spec.destination,
            warnings=warnings,
        )

        # Emit in destination declaration order
        ordered = [rules[name] for name in spec.destination.struct.field_names() if name in rules]
        plan = MappingPlan(spec=spec, rules=ordered, warnings=warnings)

        for name in plan.unresolved:
            rule = plan.get_rule(name)
            logger.warning(f"{spec.mapper_name}: field {name} left unmapped ({rule.reason})")

        return plan
