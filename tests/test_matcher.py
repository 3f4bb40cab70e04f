"""
Unit tests for the Compatibility Matcher

Tests:
- Identity, dereference and pointer wrapping
- Numeric casts between values and pointers
- Element-wise slice conversion helpers
- Refusal of maps, opaque types and incompatible families
"""

import pytest

from mappergen.mapper.mapping import HelperRequirement
from mappergen.mapper.matcher import match, match_shapes
from mappergen.parser.go_parser import parse_shape
from mappergen.schema.models import FieldDescriptor


# ============================================================================
# FIXTURES
# ============================================================================


def field(name: str, type_expr: str) -> FieldDescriptor:
    return FieldDescriptor(name=name, shape=parse_shape(type_expr))


def convert(src_type: str, dst_type: str, ref: str = "src.X"):
    return match(ref, field("X", src_type), field("X", dst_type))


# ============================================================================
# IDENTITY AND POINTERS
# ============================================================================


class TestIdentityAndPointers:
    """Rules 1 to 3"""

    @pytest.mark.parametrize(
        "type_expr",
        ["int", "string", "*bool", "[]int64", "[]*string", "time.Time", "map[string]string"],
    )
    def test_identical_shape_passes_through(self, type_expr):
        """Identical shapes produce the bare reference"""
        result = convert(type_expr, type_expr)

        assert result.possible
        assert result.expression == "src.X"
        assert result.helpers == ()

    def test_dereference_scalar(self):
        """dst T <- src *T dereferences"""
        result = convert("*string", "string")

        assert result.possible
        assert result.expression == "*src.X"

    def test_result_is_not_iterable(self):
        """Callers read fields by name"""
        with pytest.raises(TypeError):
            iter(convert("*int", "int"))

    def test_dereference_named_type(self):
        """Dereference also applies to non-primitive named types"""
        result = convert("*time.Time", "time.Time")

        assert result.expression == "*src.X"

    @pytest.mark.parametrize("type_name", ["bool", "string", "int", "float64"])
    def test_wrap_primitive_in_pointer(self, type_name):
        """dst *T <- src T wraps with the T pointer constructor"""
        result = convert(type_name, f"*{type_name}")

        assert result.possible
        assert result.expression == f"{type_name}Ptr(src.X)"
        assert result.helpers == (HelperRequirement.pointer(type_name),)

    def test_wrap_named_type_not_possible(self):
        """No pointer constructor exists for non-primitive types"""
        result = convert("time.Time", "*time.Time")

        assert not result.possible
        assert result.expression == ""


# ============================================================================
# NUMERIC CASTS
# ============================================================================


class TestNumericCasts:
    """Rules 4 to 7"""

    def test_value_to_value_double_cast(self):
        """int -> int64 casts through the destination type twice"""
        result = convert("int", "int64", ref="src.ID")

        assert result.possible
        assert result.expression == "int64(int64(src.ID))"
        assert result.helpers == ()

    def test_float_to_int(self):
        """Float to integer narrowing is still a cast"""
        assert convert("float64", "int32").expression == "int32(int32(src.X))"

    def test_pointer_to_value(self):
        """dst numeric <- src *numeric dereferences then casts"""
        assert convert("*int32", "int64").expression == "int64(*src.X)"

    def test_value_to_pointer(self):
        """dst *numeric <- src numeric casts then wraps"""
        result = convert("int", "*int64")

        assert result.expression == "int64Ptr(int64(src.X))"
        assert result.helpers == (HelperRequirement.pointer("int64"),)

    def test_pointer_to_pointer(self):
        """dst *numeric <- src *numeric dereferences, casts and re-wraps"""
        result = convert("*uint8", "*float32")

        assert result.expression == "float32Ptr(float32(*src.X))"
        assert result.helpers == (HelperRequirement.pointer("float32"),)

    @pytest.mark.parametrize(
        "src_type,dst_type",
        [("bool", "string"), ("string", "int"), ("int", "bool"), ("*string", "int64")],
    )
    def test_incompatible_families(self, src_type, dst_type):
        """bool, string and numbers never convert into each other"""
        result = convert(src_type, dst_type)

        assert not result.possible
        assert "cannot convert" in result.reason


# ============================================================================
# SLICES
# ============================================================================


class TestSlices:
    """Rule 8"""

    def test_value_slice_to_value_slice(self):
        """[]int32 -> []int64 uses the element-wise helper"""
        result = convert("[]int32", "[]int64")

        assert result.possible
        assert result.expression == "int32ArrToInt64Arr(src.X)"
        assert result.helpers[0].name == "int32ArrToInt64Arr"

    def test_pointer_slice_to_value_slice(self):
        assert convert("[]*int", "[]int64").expression == "intPtrArrToInt64Arr(src.X)"

    def test_value_slice_to_pointer_slice(self):
        """Same element type, value to pointer elements"""
        result = convert("[]string", "[]*string")

        assert result.expression == "stringArrToStringPtrArr(src.X)"
        assert result.helpers[0].dependencies() == (HelperRequirement.pointer("string"),)

    def test_pointer_slice_to_pointer_slice(self):
        assert convert("[]*float32", "[]*float64").expression == "float32PtrArrToFloat64PtrArr(src.X)"

    def test_incompatible_elements(self):
        assert not convert("[]string", "[]int").possible

    def test_nested_slices_unsupported(self):
        """Slice of slice is never converted element-wise"""
        result = convert("[][]int32", "[][]int64")

        assert not result.possible
        assert "not primitive" in result.reason

    def test_named_elements_unsupported(self):
        assert not convert("[]models.Item", "[]dto.Item").possible


# ============================================================================
# REFUSALS
# ============================================================================


class TestRefusals:
    """Rule 9"""

    def test_different_maps(self):
        assert not convert("map[string]int", "map[string]int64").possible

    def test_map_to_slice(self):
        assert not convert("map[string]string", "[]string").possible

    def test_opaque_never_matches_itself(self):
        """Inline struct types cannot be named, even when textually equal"""
        result = convert("struct{ A int }", "struct{ A int }")

        assert not result.possible
        assert "structurally" in result.reason

    def test_match_shapes_is_pure(self):
        """Same inputs always give the same answer"""
        src, dst = parse_shape("*int"), parse_shape("int64")

        assert match_shapes("a.B", src, dst) == match_shapes("a.B", src, dst)
