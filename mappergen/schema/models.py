"""Models describing record types and their field shapes."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


# Builtin scalar types the generator knows how to cast between.
NUMERIC_TYPES = frozenset(
    [
        "byte",
        "rune",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "float32",
        "float64",
    ]
)

PRIMITIVE_TYPES = NUMERIC_TYPES | frozenset(["bool", "string"])

# Predeclared names that never take a package qualifier
BUILTIN_TYPES = PRIMITIVE_TYPES | frozenset(
    ["any", "comparable", "complex64", "complex128", "error", "uintptr"]
)


@dataclass(frozen=True)
class Scalar:
    """A named type: builtin (``int64``) or qualified (``time.Time``)."""

    type_name: str

    def go_type(self) -> str:
        return self.type_name

    @property
    def is_primitive(self) -> bool:
        return self.type_name in PRIMITIVE_TYPES


@dataclass(frozen=True)
class Pointer:
    """Pointer to another shape (``*T``)."""

    elem: "Shape"

    def go_type(self) -> str:
        return f"*{self.elem.go_type()}"


@dataclass(frozen=True)
class Slice:
    """Slice of another shape (``[]T``)."""

    elem: "Shape"

    def go_type(self) -> str:
        return f"[]{self.elem.go_type()}"


@dataclass(frozen=True)
class Map:
    """Map shape (``map[K]V``), only ever matched by identity."""

    key: "Shape"
    value: "Shape"

    def go_type(self) -> str:
        return f"map[{self.key.go_type()}]{self.value.go_type()}"


@dataclass(frozen=True)
class Opaque:
    """A type expression that cannot be named structurally."""

    text: str

    def go_type(self) -> str:
        return self.text


Shape = Union[Scalar, Pointer, Slice, Map, Opaque]


def contains_opaque(shape: Shape) -> bool:
    """Check whether any part of a shape is opaque."""
    if isinstance(shape, Opaque):
        return True
    if isinstance(shape, (Pointer, Slice)):
        return contains_opaque(shape.elem)
    if isinstance(shape, Map):
        return contains_opaque(shape.key) or contains_opaque(shape.value)
    return False


def qualify(shape: Shape, package_alias: str) -> Shape:
    """
    Prefix package-local named types with ``package_alias``.

    ``Address`` declared in package ``models`` becomes ``models.Address`` so
    it no longer compares equal to an ``Address`` declared elsewhere.
    """
    if not package_alias:
        return shape
    if isinstance(shape, Scalar):
        if shape.type_name in BUILTIN_TYPES or "." in shape.type_name:
            return shape
        return Scalar(f"{package_alias}.{shape.type_name}")
    if isinstance(shape, Pointer):
        return Pointer(qualify(shape.elem, package_alias))
    if isinstance(shape, Slice):
        return Slice(qualify(shape.elem, package_alias))
    if isinstance(shape, Map):
        return Map(qualify(shape.key, package_alias), qualify(shape.value, package_alias))
    return shape


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a record type."""

    name: str
    shape: Shape

    @property
    def nilable(self) -> bool:
        """Whether the field can hold nil (pointer, slice or map)."""
        return isinstance(self.shape, (Pointer, Slice, Map))

    def go_type(self) -> str:
        return self.shape.go_type()


@dataclass
class StructDescriptor:
    """Represents one record type supplied to the mapping core."""

    name: str
    package_path: str = ""
    fields: Tuple[FieldDescriptor, ...] = field(default_factory=tuple)
    package_alias: str = ""

    @property
    def display_name(self) -> str:
        """Name as written in generated code (``alias.Name`` or ``Name``)."""
        if self.package_alias:
            return f"{self.package_alias}.{self.name}"
        return self.name

    @property
    def is_primitive(self) -> bool:
        return self.name in PRIMITIVE_TYPES and not self.package_path

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """Return field by name (exact, Go identifiers are case sensitive)."""
        for fd in self.fields:
            if fd.name == name:
                return fd
        return None

    def field_names(self) -> List[str]:
        return [fd.name for fd in self.fields]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "package_path": self.package_path,
            "display_name": self.display_name,
            "fields": [
                {
                    "name": fd.name,
                    "type": fd.go_type(),
                    "nilable": fd.nilable,
                }
                for fd in self.fields
            ],
        }


@dataclass
class SourceBinding:
    """A record type bound to the alias used for it in generated code."""

    alias: str
    struct: StructDescriptor
    position: int = 0

    def reference(self, field_name: str) -> str:
        """Textual reference to one of the bound record's fields."""
        return f"{self.alias}.{field_name}"
