"""
Unit tests for the Go declaration parser

Tests:
- Type expression to shape conversion
- Struct declarations: single, grouped, multi-name fields, tags, comments
- Non-struct declarations (aliases, defined types, generics)
- Parser factory
"""

import pytest

from mappergen.parser.go_parser import GoStructParser, find_closing, parse_shape, split_top_level
from mappergen.parser.parser_factory import DeclarationParserFactory
from mappergen.schema.models import Map, Opaque, Pointer, Scalar, Slice


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def models_source():
    """Go file with a mix of declarations"""
    return '''// Package models holds storage records.
package models

import "time"

/* User is a stored user.
   Fields mirror the users table. */
type User struct {
	ID        int64             `json:"id" db:"id"`
	Name      *string           `json:"name"` // nullable
	A, B      int32
	Tags      []string
	Scores    []*float64
	Meta      map[string]string
	CreatedAt time.Time
	Inline    struct {
		X int
	}
	Callback  func(a, b int) error
	Fixed     [4]byte
	time.Location
	*Base
}

type (
	Status int

	Alias = User

	Pair[K comparable, V any] struct {
		Key   K
		Value V
	}

	Empty struct{}
)

func (u *User) String() string {
	type local struct{ Y int }
	return "type Hidden struct {}"
}
'''


@pytest.fixture
def parser():
    return GoStructParser()


# ============================================================================
# SHAPES
# ============================================================================


class TestParseShape:
    """Type expression parsing"""

    def test_scalar(self):
        assert parse_shape("int64") == Scalar("int64")

    def test_qualified_scalar(self):
        assert parse_shape("time.Time") == Scalar("time.Time")

    def test_pointer_and_slice(self):
        assert parse_shape("[]*string") == Slice(Pointer(Scalar("string")))

    def test_map(self):
        assert parse_shape("map[string][]int") == Map(Scalar("string"), Slice(Scalar("int")))

    @pytest.mark.parametrize(
        "type_expr",
        ["struct{ X int }", "interface{}", "func() error", "chan int", "[4]byte", "List[int]"],
    )
    def test_unnameable_types_are_opaque(self, type_expr):
        assert isinstance(parse_shape(type_expr), Opaque)

    def test_go_type_round_trip_text(self):
        """Shapes render back to the Go type text"""
        assert parse_shape("map[string]*int").go_type() == "map[string]*int"


# ============================================================================
# DECLARATIONS
# ============================================================================


class TestGoStructParser:
    """Struct declaration parsing"""

    def test_package_name(self, parser, models_source):
        assert parser.parse(models_source).package == "models"

    def test_struct_fields_in_order(self, parser, models_source):
        """Named fields keep declaration order; embedded fields are skipped"""
        user = parser.parse(models_source).get("User")

        assert user.is_struct
        assert [f.name for f in user.fields] == [
            "ID", "Name", "A", "B", "Tags", "Scores", "Meta",
            "CreatedAt", "Inline", "Callback", "Fixed",
        ]

    def test_field_shapes(self, parser, models_source):
        user = parser.parse(models_source).get("User")
        shapes = {f.name: f.shape for f in user.fields}

        assert shapes["ID"] == Scalar("int64")
        assert shapes["Name"] == Pointer(Scalar("string"))
        assert shapes["A"] == shapes["B"] == Scalar("int32")
        assert shapes["Scores"] == Slice(Pointer(Scalar("float64")))
        assert shapes["Meta"] == Map(Scalar("string"), Scalar("string"))
        assert isinstance(shapes["Inline"], Opaque)
        assert isinstance(shapes["Callback"], Opaque)
        assert isinstance(shapes["Fixed"], Opaque)

    def test_nilable_fields(self, parser, models_source):
        user = parser.parse(models_source).get("User")
        nilable = {f.name for f in user.fields if f.nilable}

        assert nilable == {"Name", "Tags", "Scores", "Meta"}

    def test_grouped_declarations(self, parser, models_source):
        parsed = parser.parse(models_source)

        assert parsed.get("Status").kind == "defined"
        assert parsed.get("Alias").kind == "alias"
        assert parsed.get("Pair").kind == "generic"
        assert parsed.get("Empty").is_struct
        assert parsed.get("Empty").fields == ()

    def test_local_types_ignored(self, parser, models_source):
        """Types declared inside functions or strings are not top-level"""
        parsed = parser.parse(models_source)

        assert parsed.get("local") is None
        assert parsed.get("Hidden") is None

    def test_every_top_level_declaration_kept(self, parser, models_source):
        parsed = parser.parse(models_source)

        assert list(parsed.declarations) == ["User", "Status", "Alias", "Pair", "Empty"]

    def test_comment_markers_inside_tags_survive(self, parser):
        source = 'package x\ntype Link struct {\n\tURL string `json:"url" doc:"http://x"`\n\tN int\n}\n'
        link = parser.parse(source).get("Link")

        assert [f.name for f in link.fields] == ["URL", "N"]


class TestHelpers:
    """Bracket helpers"""

    def test_find_closing_skips_strings(self):
        text = '{ a `}` "}" { } }'
        assert find_closing(text, 0) == len(text) - 1

    def test_find_closing_unbalanced(self):
        with pytest.raises(ValueError):
            find_closing("{ (", 0)

    def test_split_top_level(self):
        assert split_top_level("a int\nb struct{\n c int\n}; d bool") == [
            "a int",
            "b struct{\n c int\n}",
            "d bool",
        ]


class TestDeclarationParserFactory:
    """Parser selection"""

    def test_go_files(self):
        assert isinstance(DeclarationParserFactory.create_parser("models/user.go"), GoStructParser)

    def test_extension_maps_to_parser_class(self):
        assert DeclarationParserFactory.PARSERS == {"go": GoStructParser}

    def test_unsupported_extension(self):
        with pytest.raises(ValueError, match="Unsupported source format: sql"):
            DeclarationParserFactory.create_parser("schema.sql")

    def test_parse_file(self, tmp_path, models_source):
        path = tmp_path / "user.go"
        path.write_text(models_source)

        parsed = DeclarationParserFactory.parse_file(path)

        assert parsed.package == "models"
        assert parsed.get("User").is_struct
