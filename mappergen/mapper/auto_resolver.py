"""Automatic resolution of destination fields by source field name."""
import logging
from typing import Callable, Dict, Optional, Sequence

from mappergen.mapper.mapping import FieldMappingRule
from mappergen.mapper.matcher import MatchResult, match
from mappergen.schema.models import SourceBinding, StructDescriptor

logger = logging.getLogger(__name__)


class AutomaticResolver:
    """
    Matches every destination field against same-named source fields.

    Sources are visited in configured order and a later compatible source
    overwrites an earlier one, so the last declared source wins.
    """

    def __init__(self, matcher: Optional[Callable[..., MatchResult]] = None):
        self.matcher = matcher or match

    def resolve(
        self,
        destination: StructDescriptor,
        sources: Sequence[SourceBinding],
    ) -> Dict[str, FieldMappingRule]:
        """
        Build one rule per destination field, in destination declaration order.

        Fields with no compatible same-named source field get an unresolved
        rule carrying the reason.
        """
        rules: Dict[str, FieldMappingRule] = {}

        for dest_field in destination.fields:
            rule = FieldMappingRule(
                dest_field=dest_field.name,
                resolved=False,
                reason="no source field with this name",
            )

            for binding in sources:
                source_field = binding.struct.get_field(dest_field.name)
                if source_field is None:
                    continue

                result = self.matcher(binding.reference(source_field.name), source_field, dest_field)
                if result.possible:
                    rule = FieldMappingRule(
                        dest_field=dest_field.name,
                        resolved=True,
                        expression=result.expression,
                        source_alias=binding.alias,
                        source_field=source_field.name,
                        source_is_pointer=source_field.nilable,
                        helpers=result.helpers,
                    )
                elif not rule.resolved:
                    rule = FieldMappingRule(
                        dest_field=dest_field.name,
                        resolved=False,
                        source_alias=binding.alias,
                        source_field=source_field.name,
                        reason=result.reason,
                    )

            rules[dest_field.name] = rule

        resolved = sum(1 for rule in rules.values() if rule.resolved)
        logger.info(
            f"Resolved {resolved}/{len(rules)} fields of {destination.display_name} "
            f"from {len(sources)} sources"
        )
        return rules
