"""
Compatibility Matcher - decides how one source field can populate one
destination field.

Decision table, first match wins:
1. identical shape                      -> ``src.X``
2. dst T, src *T                        -> ``*src.X``
3. dst *T, src T (bool/string/numeric)  -> ``TPtr(src.X)``
4. numeric T <- numeric S               -> ``T(T(src.X))``
5. numeric T <- *numeric S              -> ``T(*src.X)``
6. *numeric T <- numeric S              -> ``TPtr(T(src.X))``
7. *numeric T <- *numeric S             -> ``TPtr(T(*src.X))``
8. slices of compatible primitive elements -> ``sArrToTArr(src.X)`` and the
   Ptr variants for pointer elements on either side
9. anything else is not possible

Maps only ever match by identity. Nested slices are not converted.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from mappergen.mapper.mapping import HelperRequirement
from mappergen.schema.models import (
    NUMERIC_TYPES,
    FieldDescriptor,
    Pointer,
    Scalar,
    Shape,
    Slice,
    contains_opaque,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one source field against one destination field."""

    expression: str
    possible: bool
    helpers: Tuple[HelperRequirement, ...] = ()
    reason: str = ""


def match(
    source_ref: str,
    source_field: FieldDescriptor,
    dest_field: FieldDescriptor,
) -> MatchResult:
    """
    Decide whether ``source_field`` can populate ``dest_field``.

    Args:
        source_ref: Textual reference to the source value (``alias.Field``)
        source_field: Source field descriptor
        dest_field: Destination field descriptor

    Returns:
        MatchResult with the conversion expression when possible
    """
    result = match_shapes(source_ref, source_field.shape, dest_field.shape)
    logger.debug(
        f"{source_ref} ({source_field.go_type()}) -> {dest_field.name} "
        f"({dest_field.go_type()}): "
        f"{result.expression if result.possible else 'not possible'}"
    )
    return result


def match_shapes(source_ref: str, source: Shape, dest: Shape) -> MatchResult:
    """Apply the decision table to two shapes."""
    if contains_opaque(source) or contains_opaque(dest):
        return _impossible(source, dest, "type cannot be named structurally")

    if source == dest:
        return MatchResult(expression=source_ref, possible=True)

    if isinstance(source, Pointer) and source.elem == dest:
        return MatchResult(expression=f"*{source_ref}", possible=True)

    scalar = _match_primitive(source_ref, source, dest)
    if scalar is not None:
        return scalar

    if isinstance(source, Slice) and isinstance(dest, Slice):
        return _match_slice(source_ref, source, dest)

    return _impossible(source, dest)


def primitive_parts(shape: Shape) -> Optional[Tuple[str, bool]]:
    """``(type name, is pointer)`` for ``T`` or ``*T`` with T a builtin primitive."""
    is_pointer = False
    if isinstance(shape, Pointer):
        shape = shape.elem
        is_pointer = True

    if isinstance(shape, Scalar) and shape.is_primitive:
        return shape.type_name, is_pointer
    return None


def convertible(source_type: str, dest_type: str) -> bool:
    """Same primitive, or both numeric."""
    if source_type == dest_type:
        return True
    return source_type in NUMERIC_TYPES and dest_type in NUMERIC_TYPES


def _match_primitive(source_ref: str, source: Shape, dest: Shape) -> Optional[MatchResult]:
    """Rules 3 to 7: pointer wrapping and numeric casts between primitives."""
    src_parts = primitive_parts(source)
    dst_parts = primitive_parts(dest)
    if src_parts is None or dst_parts is None:
        return None

    src_type, src_ptr = src_parts
    dst_type, dst_ptr = dst_parts

    if not convertible(src_type, dst_type):
        return None

    if src_type == dst_type:
        # Identity and dereference were handled already
        if dst_ptr and not src_ptr:
            helper = HelperRequirement.pointer(dst_type)
            return MatchResult(f"{helper.name}({source_ref})", True, (helper,))
        return None

    value = f"*{source_ref}" if src_ptr else source_ref

    if not dst_ptr:
        if src_ptr:
            return MatchResult(f"{dst_type}({value})", True)
        return MatchResult(f"{dst_type}({dst_type}({value}))", True)

    helper = HelperRequirement.pointer(dst_type)
    return MatchResult(f"{helper.name}({dst_type}({value}))", True, (helper,))


def _match_slice(source_ref: str, source: Slice, dest: Slice) -> MatchResult:
    """Rule 8: element-wise conversion of primitive slices."""
    src_parts = primitive_parts(source.elem)
    dst_parts = primitive_parts(dest.elem)
    if src_parts is None or dst_parts is None:
        return _impossible(source, dest, "slice elements are not primitive")

    src_type, src_ptr = src_parts
    dst_type, dst_ptr = dst_parts
    if not convertible(src_type, dst_type):
        return _impossible(source, dest)

    helper = HelperRequirement.slice(src_type, dst_type, src_ptr, dst_ptr)
    return MatchResult(f"{helper.name}({source_ref})", True, (helper,))


def _impossible(source: Shape, dest: Shape, detail: str = "") -> MatchResult:
    reason = f"cannot convert {source.go_type()} to {dest.go_type()}"
    if detail:
        reason = f"{reason}: {detail}"
    return MatchResult(expression="", possible=False, reason=reason)
