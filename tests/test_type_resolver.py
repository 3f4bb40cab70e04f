"""
Unit tests for type resolution (introspection)

Tests:
- ImportAliasRegistry: stable aliases, collision suffixes
- TypeResolver: relative paths, GOPATH fallback, go.mod import paths
- Failure modes: malformed paths, missing files, missing or non-struct types
"""

import pytest

from mappergen.exceptions import TypeResolutionError
from mappergen.introspection.alias_registry import ImportAliasRegistry
from mappergen.introspection.type_resolver import TypeResolver
from mappergen.schema.models import Pointer, Scalar


# ============================================================================
# FIXTURES
# ============================================================================


USER_GO = """package models

type User struct {
	ID   int64
	Name *string
}

type Status int

type Legacy = User
"""

ACCOUNT_GO = """package models

type Account struct {
	Number string
}
"""


@pytest.fixture
def project(tmp_path):
    """Go module with a models package, a legacy models package and a config dir"""
    (tmp_path / "go.mod").write_text("module example.com/shop\n\ngo 1.21\n")
    (tmp_path / "models").mkdir()
    (tmp_path / "models" / "user.go").write_text(USER_GO)
    (tmp_path / "legacy" / "models").mkdir(parents=True)
    (tmp_path / "legacy" / "models" / "account.go").write_text(ACCOUNT_GO)
    (tmp_path / "dto").mkdir()
    (tmp_path / "dto" / "user_dto.go").write_text(
        "package dto\n\ntype UserDTO struct {\n\tID int\n}\n"
    )
    return tmp_path


@pytest.fixture
def resolver(project):
    return TypeResolver(
        base_dir=project / "dto",
        registry=ImportAliasRegistry(),
        local_package_dir=project / "dto",
    )


# ============================================================================
# ALIAS REGISTRY
# ============================================================================


class TestImportAliasRegistry:
    """Per-run import alias bookkeeping"""

    def test_default_alias_from_last_segment(self):
        assert ImportAliasRegistry.default_alias("example.com/shop/models") == "models"

    @pytest.mark.parametrize(
        "path,alias",
        [("example.com/go-kit/v2", "v2"), ("example.com/my-pkg", "my_pkg"), ("example.com/2fa", "_2fa")],
    )
    def test_default_alias_is_identifier(self, path, alias):
        assert ImportAliasRegistry.default_alias(path) == alias

    def test_same_path_same_alias(self):
        registry = ImportAliasRegistry()

        assert registry.alias_for("example.com/a/models") == "models"
        assert registry.alias_for("example.com/a/models") == "models"
        assert len(registry) == 1

    def test_collisions_get_numeric_suffix(self):
        registry = ImportAliasRegistry()

        aliases = [
            registry.alias_for("example.com/a/models"),
            registry.alias_for("example.com/b/models"),
            registry.alias_for("example.com/c/models"),
        ]

        assert aliases == ["models", "models1", "models2"]

    def test_preferred_alias(self):
        registry = ImportAliasRegistry()

        assert registry.alias_for("example.com/api/v1", preferred="api") == "api"

    def test_imports_sorted(self):
        registry = ImportAliasRegistry()
        registry.alias_for("example.com/z/zeta")
        registry.alias_for("example.com/a/alpha")

        assert registry.imports() == [
            ("alpha", "example.com/a/alpha"),
            ("zeta", "example.com/z/zeta"),
        ]
        assert registry.has_path("example.com/z/zeta")

    def test_registries_are_independent(self):
        first, second = ImportAliasRegistry(), ImportAliasRegistry()
        first.alias_for("example.com/a/models")

        assert second.alias_for("example.com/b/models") == "models"


# ============================================================================
# RESOLUTION
# ============================================================================


class TestTypeResolver:
    """Type path resolution"""

    def test_resolve_relative_path(self, resolver):
        user = resolver.resolve("../models/user.User")

        assert user.name == "User"
        assert user.package_path == "example.com/shop/models"
        assert user.display_name == "models.User"
        assert [f.shape for f in user.fields] == [Scalar("int64"), Pointer(Scalar("string"))]

    def test_package_local_field_types_qualified(self, project, resolver):
        (project / "models" / "order.go").write_text(
            "package models\n\ntype Order struct {\n"
            "\tShip  *Address\n\tLines []Line\n\tErr   error\n\tAt    time.Time\n}\n"
        )

        order = resolver.resolve("../models/order.Order")

        assert [f.go_type() for f in order.fields] == [
            "*models.Address", "[]models.Line", "error", "time.Time",
        ]

    def test_local_package_unqualified(self, resolver):
        dto = resolver.resolve("user_dto.UserDTO")

        assert dto.display_name == "UserDTO"
        assert dto.package_path == ""
        assert len(resolver.registry) == 0

    def test_package_name_collision(self, resolver):
        user = resolver.resolve("../models/user.User")
        account = resolver.resolve("../legacy/models/account.Account")

        assert user.package_alias == "models"
        assert account.package_alias == "models1"
        assert resolver.registry.imports() == [
            ("models", "example.com/shop/models"),
            ("models1", "example.com/shop/legacy/models"),
        ]

    def test_primitive_pseudo_type(self, resolver):
        descriptor = resolver.resolve("int64")

        assert descriptor.is_primitive
        assert descriptor.fields == ()
        assert descriptor.display_name == "int64"

    def test_gopath_fallback(self, tmp_path):
        gopath = tmp_path / "gopath"
        package = gopath / "src" / "github.com" / "acme" / "billing"
        package.mkdir(parents=True)
        (package / "invoice.go").write_text("package billing\n\ntype Invoice struct {\n\tTotal float64\n}\n")
        (tmp_path / "cfg").mkdir()

        resolver = TypeResolver(
            base_dir=tmp_path / "cfg", registry=ImportAliasRegistry(), gopath=str(gopath)
        )
        invoice = resolver.resolve("github.com/acme/billing/invoice.Invoice")

        assert invoice.package_path == "github.com/acme/billing"
        assert invoice.display_name == "billing.Invoice"

    def test_file_parsed_once(self, resolver, project):
        resolver.resolve("../models/user.User")
        (project / "models" / "user.go").write_text("package models\n")

        assert resolver.resolve("../models/user.User").get_field("ID") is not None

    def test_resolve_import(self, resolver):
        assert resolver.resolve_import("../models") == "example.com/shop/models"
        assert resolver.resolve_import("encoding/json") == "encoding/json"


class TestTypeResolutionErrors:
    """Fatal resolution failures"""

    @pytest.mark.parametrize("type_path", ["User", ".User", "models/user."])
    def test_malformed_path(self, resolver, type_path):
        with pytest.raises(TypeResolutionError, match="incorrect"):
            resolver.resolve(type_path)

    def test_missing_file(self, resolver):
        with pytest.raises(TypeResolutionError, match="incorrect file path"):
            resolver.resolve("../models/missing.User")

    def test_missing_type(self, resolver):
        with pytest.raises(TypeResolutionError, match="structure Customer not found"):
            resolver.resolve("../models/user.Customer")

    @pytest.mark.parametrize("type_name", ["Status", "Legacy"])
    def test_type_without_struct_body(self, resolver, type_name):
        with pytest.raises(TypeResolutionError, match="has no struct body") as exc_info:
            resolver.resolve(f"../models/user.{type_name}")

        assert exc_info.value.type_path == f"../models/user.{type_name}"
