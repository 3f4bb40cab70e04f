"""
Type Resolver - Turns configured type paths into struct descriptors.

A type path is ``<file path without .go>.<TypeName>``, e.g.
``../models/user.User``. Lookup order:
- relative to the configuration file directory
- ``$GOPATH/src/<file>.go``

Builtin primitive names (``int64``, ``string``, ...) resolve to
zero-field pseudo-types.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Tuple

from mappergen.exceptions import TypeResolutionError
from mappergen.introspection.alias_registry import ImportAliasRegistry
from mappergen.parser.base import ParsedSource
from mappergen.parser.parser_factory import DeclarationParserFactory
from mappergen.schema.models import PRIMITIVE_TYPES, FieldDescriptor, StructDescriptor, qualify

logger = logging.getLogger(__name__)


class TypeResolver:
    """
    Resolves type paths to StructDescriptor values

    Usage:
    ```python
    resolver = TypeResolver(base_dir=Path("config"), registry=ImportAliasRegistry())
    user = resolver.resolve("../models/user.User")
    print(user.display_name, [f.name for f in user.fields])
    ```
    """

    MODULE_PATTERN = re.compile(r'^\s*module\s+"?([^"\s]+)"?', re.MULTILINE)

    def __init__(
        self,
        base_dir: Path,
        registry: ImportAliasRegistry,
        gopath: str = "",
        local_package_dir: Optional[Path] = None,
    ):
        """
        Initialize TypeResolver

        Args:
            base_dir: Directory relative type paths start from
            registry: Import alias registry for this run
            gopath: Value of GOPATH used as lookup fallback
            local_package_dir: Directory of the generated file; types declared
                               there are left unqualified
        """
        self.base_dir = Path(base_dir)
        self.registry = registry
        self.gopath = gopath
        self.local_package_dir = local_package_dir.resolve() if local_package_dir else None

        # Parsed files, one parse per file per run
        self._file_cache: Dict[Path, ParsedSource] = {}
        self._module_cache: Dict[Path, Optional[Tuple[Path, str]]] = {}

    def resolve(self, type_path: str) -> StructDescriptor:
        """
        Resolve a type path to a descriptor

        Raises:
            TypeResolutionError: If the path is malformed, the file cannot be
                found, the type is not declared there or is not a struct
        """
        if type_path in PRIMITIVE_TYPES:
            return StructDescriptor(name=type_path)

        file_part, type_name = self.split_type_path(type_path)
        file_path = self.locate_file(file_part, type_path)
        parsed = self._parse(file_path, type_path)

        declaration = parsed.get(type_name)
        if declaration is None:
            raise TypeResolutionError(
                f"structure {type_name} not found in file {file_path}", type_path
            )
        if not declaration.is_struct:
            raise TypeResolutionError(
                f"type {type_name} in file {file_path} has no struct body "
                f"({declaration.kind} {declaration.underlying})".rstrip(),
                type_path,
            )

        package_path = self.import_path_for(file_path.parent)
        alias = ""
        if package_path:
            alias = self.registry.alias_for(package_path, preferred=parsed.package or None)

        descriptor = StructDescriptor(
            name=type_name,
            package_path=package_path,
            fields=tuple(
                FieldDescriptor(name=fd.name, shape=qualify(fd.shape, alias))
                for fd in declaration.fields
            ),
            package_alias=alias,
        )
        logger.debug(
            f"Resolved {type_path} -> {descriptor.display_name} "
            f"({len(descriptor.fields)} fields)"
        )
        return descriptor

    @staticmethod
    def split_type_path(type_path: str) -> Tuple[str, str]:
        """Split ``dir/file.Type`` into the file path and the type name."""
        i = type_path.rfind(".")
        if i <= 0 or i + 1 >= len(type_path):
            raise TypeResolutionError(f"source path \"{type_path}\" incorrect", type_path)

        file_part = type_path[:i]
        if not file_part.endswith(".go"):
            file_part = f"{file_part}.go"
        return file_part, type_path[i + 1:]

    def locate_file(self, file_part: str, type_path: str = "") -> Path:
        """Find the declaring file relative to base_dir, then under GOPATH."""
        candidates = [self.base_dir / file_part]
        if self.gopath:
            candidates.append(Path(self.gopath) / "src" / file_part)

        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()

        tried = ", ".join(str(c) for c in candidates)
        raise TypeResolutionError(f"incorrect file path {file_part} (tried: {tried})", type_path)

    def import_path_for(self, directory: Path) -> str:
        """
        Compute the import path of the package in ``directory``

        Returns:
            "" for the generated file's own package, otherwise the go.mod
            module path, the path below $GOPATH/src, or the absolute directory
        """
        directory = directory.resolve()
        if self.local_package_dir is not None and directory == self.local_package_dir:
            return ""

        module = self._find_module(directory)
        if module is not None:
            root, module_path = module
            relative = directory.relative_to(root).as_posix()
            return module_path if relative == "." else f"{module_path}/{relative}"

        if self.gopath:
            gopath_src = (Path(self.gopath) / "src").resolve()
            try:
                return directory.relative_to(gopath_src).as_posix()
            except ValueError:
                pass

        return directory.as_posix()

    def resolve_import(self, path: str) -> str:
        """Resolve a configured import: filesystem paths like type packages, others verbatim."""
        if path.startswith(".") or Path(path).is_absolute():
            return self.import_path_for(self.base_dir / path)
        return path

    def _parse(self, file_path: Path, type_path: str) -> ParsedSource:
        """Parse a file once per run."""
        if file_path not in self._file_cache:
            try:
                self._file_cache[file_path] = DeclarationParserFactory.parse_file(file_path)
            except (OSError, UnicodeDecodeError, ValueError) as e:
                raise TypeResolutionError(f"cannot parse {file_path}: {e}", type_path)
        return self._file_cache[file_path]

    def _find_module(self, directory: Path) -> Optional[Tuple[Path, str]]:
        """Nearest go.mod at or above ``directory``: (module root, module path)."""
        if directory in self._module_cache:
            return self._module_cache[directory]

        result = None
        for candidate in [directory, *directory.parents]:
            go_mod = candidate / "go.mod"
            if go_mod.is_file():
                match = self.MODULE_PATTERN.search(go_mod.read_text(encoding="utf-8"))
                if match:
                    result = (candidate, match.group(1))
                break

        self._module_cache[directory] = result
        return result
