"""
Manual relations: parsing and applying them over automatic rules.

String form:      ``"[dst.]Field: <expression>"``
Structured form:  ``{field: "[dst.]Field", expr: "<expression>", guard: "alias.Field"}``

The expression is emitted verbatim. For the string form the source field
that needs a nil guard is inferred from the expression text; the
structured form names it (or disables it) explicitly.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from mappergen.exceptions import ConfigurationError
from mappergen.mapper.mapping import FieldMappingRule
from mappergen.schema.config_models import RawRelation, RelationEntry
from mappergen.schema.models import FieldDescriptor, SourceBinding, StructDescriptor

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z_]\w*$')


@dataclass(frozen=True)
class Relation:
    """A parsed manual relation."""

    dest_field: str
    expression: str
    dest_alias: str = ""
    guard: Optional[str] = None
    guard_declared: bool = False
    raw: str = ""


@dataclass(frozen=True)
class Provenance:
    """Source field an expression was attributed to."""

    binding: SourceBinding
    field: FieldDescriptor
    ambiguous: bool = False
    candidates: tuple = ()


def parse_relation(raw: RawRelation) -> Relation:
    """
    Parse a relation entry.

    Raises:
        ConfigurationError: If a string relation does not contain exactly
            one ``:``, or the destination or expression part is empty
    """
    if isinstance(raw, RelationEntry):
        dest_alias, dest_field = _split_destination(raw.field, raw.field)
        expression = raw.expr.strip()
        if not expression:
            raise ConfigurationError(f"relation {raw.field!r} has an empty expression")
        return Relation(
            dest_field=dest_field,
            expression=expression,
            dest_alias=dest_alias,
            guard=raw.guard.strip() if raw.guard else None,
            guard_declared=True,
            raw=f"{raw.field}: {raw.expr}",
        )

    parts = raw.split(":")
    if len(parts) != 2:
        raise ConfigurationError(f"relation {raw!r} incorrect format: expected exactly one ':'")

    dest_row, expression = parts[0].strip(), parts[1].strip()
    if not expression:
        raise ConfigurationError(f"relation {raw!r} has an empty expression")

    dest_alias, dest_field = _split_destination(dest_row, raw)
    return Relation(dest_field=dest_field, expression=expression, dest_alias=dest_alias, raw=raw)


def _split_destination(dest_row: str, raw: str):
    """``dst.Field`` or ``Field`` -> (alias, field)."""
    dest_alias, _, dest_field = dest_row.strip().rpartition(".")
    dest_field = dest_field.strip()
    if not IDENTIFIER_PATTERN.match(dest_field):
        raise ConfigurationError(f"relation {raw!r} has an invalid destination field {dest_field!r}")
    return dest_alias.strip(), dest_field


def search_used_source(
    sources: Sequence[SourceBinding], expression: str
) -> List[SourceBinding]:
    """Source bindings whose alias occurs in the expression, in configured order."""
    return [binding for binding in sources if binding.alias in expression]


def search_used_field(
    binding: SourceBinding, expression: str
) -> Optional[List[FieldDescriptor]]:
    """
    Fields of ``binding`` referenced by the expression.

    An exact ``alias.Field`` expression wins outright. Otherwise every field
    whose reference occurs in the expression is a candidate, longest name
    first; equal lengths keep declaration order.
    """
    for fd in binding.struct.fields:
        if expression == binding.reference(fd.name):
            return [fd]

    found = [fd for fd in binding.struct.fields if binding.reference(fd.name) in expression]
    if not found:
        return None
    return sorted(found, key=lambda fd: -len(fd.name))


def infer_provenance(
    sources: Sequence[SourceBinding], expression: str
) -> Optional[Provenance]:
    """
    Best-effort attribution of an expression to one source field.

    The first source whose alias is a substring of the expression and that
    has a referenced field is used (alias ``a`` also occurs inside ``ab.X``,
    so later aliases are tried). The match is flagged ambiguous when several
    aliases occur or several fields of the same name length are referenced.
    """
    used_sources = search_used_source(sources, expression)

    binding, fields = None, None
    for candidate in used_sources:
        fields = search_used_field(candidate, expression)
        if fields:
            binding = candidate
            break

    if binding is None:
        return None

    chosen = fields[0]
    ties = [fd for fd in fields[1:] if len(fd.name) == len(chosen.name)]
    ambiguous = len(used_sources) > 1 or bool(ties)
    candidates = tuple(b.alias for b in used_sources) + tuple(
        binding.reference(fd.name) for fd in ties
    )
    return Provenance(binding=binding, field=chosen, ambiguous=ambiguous, candidates=candidates)


class RelationOverrider:
    """Folds manual relations into automatically resolved rules."""

    def apply(
        self,
        rules: Dict[str, FieldMappingRule],
        relations: Sequence[Relation],
        sources: Sequence[SourceBinding],
        destination: Optional[SourceBinding] = None,
        warnings: Optional[List[str]] = None,
    ) -> Dict[str, FieldMappingRule]:
        """
        Return a new rule mapping with every relation applied in order.

        A relation always replaces the rule for its destination field; a
        later relation for the same field replaces an earlier one.

        Raises:
            ConfigurationError: If a relation targets an unknown destination
                field or declares a guard naming no configured source field
        """
        result = dict(rules)
        warnings = warnings if warnings is not None else []

        for relation in relations:
            if destination is not None:
                self._check_destination(relation, destination.struct, destination.alias)
            elif relation.dest_field not in result:
                raise ConfigurationError(
                    f"relation {relation.raw!r} targets unknown field {relation.dest_field!r}"
                )

            rule = self._build_rule(relation, sources, warnings)
            if relation.dest_field in result and result[relation.dest_field].resolved:
                logger.debug(f"Relation overrides automatic rule for {relation.dest_field}")
            result[relation.dest_field] = rule

        return result

    @staticmethod
    def _check_destination(relation: Relation, struct: StructDescriptor, alias: str) -> None:
        if struct.get_field(relation.dest_field) is None:
            raise ConfigurationError(
                f"relation {relation.raw!r} targets unknown field "
                f"{relation.dest_field!r} of {struct.display_name}"
            )
        if relation.dest_alias and relation.dest_alias != alias:
            logger.warning(
                f"Relation {relation.raw!r} uses destination alias "
                f"{relation.dest_alias!r}, configured alias is {alias!r}; ignoring it"
            )

    def _build_rule(
        self,
        relation: Relation,
        sources: Sequence[SourceBinding],
        warnings: List[str],
    ) -> FieldMappingRule:
        if relation.guard_declared:
            provenance = self._declared_guard(relation, sources)
        else:
            provenance = infer_provenance(sources, relation.expression)

        if provenance is None:
            return FieldMappingRule(
                dest_field=relation.dest_field,
                resolved=True,
                expression=relation.expression,
                manual=True,
            )

        if provenance.ambiguous:
            message = (
                f"relation {relation.raw!r}: nil guard attributed to "
                f"{provenance.binding.reference(provenance.field.name)} "
                f"among {', '.join(provenance.candidates)}; declare 'guard' to make it explicit"
            )
            logger.warning(message)
            warnings.append(message)

        return FieldMappingRule(
            dest_field=relation.dest_field,
            resolved=True,
            expression=relation.expression,
            source_alias=provenance.binding.alias,
            source_field=provenance.field.name,
            source_is_pointer=provenance.field.nilable,
            manual=True,
            ambiguous=provenance.ambiguous,
        )

    @staticmethod
    def _declared_guard(
        relation: Relation, sources: Sequence[SourceBinding]
    ) -> Optional[Provenance]:
        """Look up an explicitly declared ``alias.Field`` guard."""
        if not relation.guard:
            return None

        alias, _, field_name = relation.guard.partition(".")
        for binding in sources:
            if binding.alias != alias:
                continue
            fd = binding.struct.get_field(field_name)
            if fd is not None:
                return Provenance(binding=binding, field=fd)

        raise ConfigurationError(
            f"relation {relation.raw!r} declares guard {relation.guard!r} "
            f"which names no configured source field"
        )
