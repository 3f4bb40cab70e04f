"""
Field Builder - Renders the statement for one field mapping rule

Supports:
- Plain assignment (dst.Field = expression)
- Nil-guarded assignment for nil-able source fields
- Inert comments for fields that could not be mapped
"""

import logging
from typing import List

from mappergen.builder.template_engine import TemplateEngine
from mappergen.mapper.mapping import FieldMappingRule

logger = logging.getLogger(__name__)


class FieldBuilder:
    """Builds the Go statements for individual fields"""

    ASSIGN_TEMPLATE = "${dst}.${field} = ${expr}"
    GUARD_TEMPLATE = "if ${guard} != nil {"
    UNMAPPED_TEMPLATE = "// ${dst}.${field}: not mapped (${reason})"
    AMBIGUOUS_TEMPLATE = "// nil guard inferred from ${guard}, check the relation"

    def __init__(self, template_engine: TemplateEngine = None):
        self.template_engine = template_engine or TemplateEngine()

    def build_field(self, rule: FieldMappingRule, dst_alias: str) -> List[str]:
        """
        Build the statement lines for one rule (without base indentation)

        Args:
            rule: Resolved or unresolved field mapping rule
            dst_alias: Name of the destination variable

        Returns:
            Lines of Go code; nested lines carry their own leading tab
        """
        render = self.template_engine.evaluate

        if not rule.resolved:
            return [
                render(
                    self.UNMAPPED_TEMPLATE,
                    dst=dst_alias,
                    field=rule.dest_field,
                    reason=rule.reason or "no rule",
                )
            ]

        assignment = render(
            self.ASSIGN_TEMPLATE, dst=dst_alias, field=rule.dest_field, expr=rule.expression
        )

        lines = []
        if rule.ambiguous:
            lines.append(render(self.AMBIGUOUS_TEMPLATE, guard=rule.source_reference))

        if rule.source_is_pointer and rule.has_provenance:
            lines.append(render(self.GUARD_TEMPLATE, guard=rule.source_reference))
            lines.append(f"\t{assignment}")
            lines.append("}")
        else:
            lines.append(assignment)

        return lines

    def build_fields(self, rules: List[FieldMappingRule], dst_alias: str) -> List[str]:
        """Build statements for several rules in order"""
        lines: List[str] = []
        for rule in rules:
            lines.extend(self.build_field(rule, dst_alias))
        return lines
