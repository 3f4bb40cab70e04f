"""Mapping plan validation."""
from typing import List

from mappergen.builder.code_builder import GoCodeBuilder
from mappergen.mapper.mapping import MappingPlan


class PlanValidator:
    """Cross-plan checks before anything is written."""

    def validate(self, plans: List[MappingPlan]) -> List[str]:
        """Return fatal problems (generated functions sharing a name)."""
        errors = []

        seen = {}
        for plan in plans:
            for name in (plan.spec.mapper_name, plan.spec.list_mapper_name):
                if name in seen:
                    errors.append(
                        f"Function {name} generated by both {seen[name]} and "
                        f"{plan.spec.destination.struct.display_name} mappers; set a distinct alias"
                    )
                else:
                    seen[name] = plan.spec.destination.struct.display_name

        helper_names = {h.name for h in GoCodeBuilder.collect_helpers(plans)}
        for name in sorted(helper_names & set(seen)):
            errors.append(f"Mapper function {name} collides with a generated helper")

        return errors

    def warnings(self, plans: List[MappingPlan]) -> List[str]:
        """Non-fatal findings: unmapped fields and ambiguous relations."""
        warnings = []

        for plan in plans:
            for name in plan.unresolved:
                rule = plan.get_rule(name)
                warnings.append(f"{plan.spec.mapper_name}: {name} not mapped ({rule.reason})")
            warnings.extend(f"{plan.spec.mapper_name}: {w}" for w in plan.warnings)

        return warnings
