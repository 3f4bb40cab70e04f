"""Parser for Go struct declarations."""
import logging
import re
from typing import List, Optional, Tuple

from mappergen.parser.base import DeclarationParser, ParsedSource, TypeDeclaration
from mappergen.schema.models import (
    FieldDescriptor,
    Map,
    Opaque,
    Pointer,
    Scalar,
    Shape,
    Slice,
)

logger = logging.getLogger(__name__)

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = set(OPENERS.values())


def _skip_string(text: str, index: int) -> int:
    """Return the index just past the string literal starting at ``index``."""
    quote = text[index]
    i = index + 1
    while i < len(text):
        char = text[i]
        if char == "\\" and quote != "`":
            i += 2
            continue
        if char == quote:
            return i + 1
        i += 1
    return len(text)


def find_closing(text: str, open_index: int) -> int:
    """
    Find the bracket closing the one at ``open_index``.

    String literals are skipped so brackets inside tags do not count.

    Raises:
        ValueError: If the bracket is never closed
    """
    depth = 0
    i = open_index
    while i < len(text):
        char = text[i]
        if char in "\"'`":
            i = _skip_string(text, i)
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise ValueError(f"Unbalanced bracket at offset {open_index}")


def split_top_level(text: str, separators: str = "\n;") -> List[str]:
    """Split text on separators that are not nested inside brackets or strings."""
    parts = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        char = text[i]
        if char in "\"'`":
            i = _skip_string(text, i)
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth -= 1
        elif char in separators and depth == 0:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return [part.strip() for part in parts if part.strip()]


def parse_shape(type_expr: str) -> Shape:
    """
    Convert a Go type expression into a structural shape.

    Examples:
        ``*int64``            -> Pointer(Scalar("int64"))
        ``[]*string``         -> Slice(Pointer(Scalar("string")))
        ``map[string]int``    -> Map(Scalar("string"), Scalar("int"))
        ``struct{ X int }``   -> Opaque(...)
    """
    expr = type_expr.strip()

    if expr.startswith("*"):
        return Pointer(parse_shape(expr[1:]))

    if expr.startswith("[]"):
        return Slice(parse_shape(expr[2:]))

    if expr.startswith("map["):
        try:
            close = find_closing(expr, 3)
        except ValueError:
            return Opaque(expr)
        value = expr[close + 1:].strip()
        if not value:
            return Opaque(expr)
        return Map(parse_shape(expr[4:close]), parse_shape(value))

    if GoStructParser.QUALIFIED_PATTERN.match(expr):
        return Scalar(expr)

    # Fixed-size arrays, inline struct/interface, func, chan, generics
    return Opaque(expr)


class GoStructParser(DeclarationParser):
    """Extracts type declarations from Go source files."""

    # Block comments are replaced by their newlines so line splitting still works
    COMMENT_PATTERN = re.compile(
        r'(`[^`]*`|"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\')|//[^\n]*|/\*.*?\*/',
        re.DOTALL,
    )
    PACKAGE_PATTERN = re.compile(r'^\s*package\s+(\w+)', re.MULTILINE)
    TYPE_KEYWORD_PATTERN = re.compile(r'^type\b', re.MULTILINE)
    SPEC_PATTERN = re.compile(r'([A-Za-z_]\w*)\s*(.*)$', re.DOTALL)
    STRUCT_PATTERN = re.compile(r'^struct\s*\{', re.DOTALL)
    ARRAY_LENGTH_PATTERN = re.compile(r'^\s*(?:[\w.]*|\.\.\.)\s*$')
    QUALIFIED_PATTERN = re.compile(r'^[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)?$')
    FIELD_PATTERN = re.compile(
        r'^([A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s+(\S.*)$', re.DOTALL
    )
    TAG_PATTERN = re.compile(r'\s*(`[^`]*`|"(?:\\.|[^"\\])*")\s*$')

    def parse(self, content: str) -> ParsedSource:
        """
        Parse a Go source file.

        Args:
            content: Go source code

        Returns:
            ParsedSource: Package name and type declarations
        """
        content = self.strip_comments(content)
        parsed = ParsedSource()

        package_match = self.PACKAGE_PATTERN.search(content)
        if package_match:
            parsed.package = package_match.group(1)

        for spec in self._type_specs(content):
            declaration = self._parse_type_spec(spec)
            if declaration is not None:
                parsed.declarations[declaration.name] = declaration

        logger.debug(
            f"Parsed package {parsed.package or '?'}: "
            f"{len(parsed.declarations)} type declarations"
        )
        return parsed

    @classmethod
    def strip_comments(cls, content: str) -> str:
        """Remove comments while leaving string literals untouched."""
        def replace(match):
            if match.group(1):
                return match.group(1)
            return "\n" * match.group(0).count("\n")

        return cls.COMMENT_PATTERN.sub(replace, content)

    def _type_specs(self, content: str) -> List[str]:
        """Collect the text of every top-level type spec."""
        specs = []

        for match in self.TYPE_KEYWORD_PATTERN.finditer(content):
            start = match.end()
            while start < len(content) and content[start] in " \t":
                start += 1

            if start < len(content) and content[start] == "(":
                try:
                    close = find_closing(content, start)
                except ValueError:
                    logger.warning(f"Unterminated type group at offset {start}")
                    continue
                specs.extend(split_top_level(content[start + 1:close]))
            else:
                remainder = split_top_level(content[start:])
                if remainder:
                    specs.append(remainder[0])

        return specs

    def _parse_type_spec(self, spec: str) -> Optional[TypeDeclaration]:
        """Parse ``Name [params] [=] Type`` into a declaration."""
        match = self.SPEC_PATTERN.match(spec.strip())
        if not match:
            return None

        name, rest = match.group(1), match.group(2).strip()

        if rest.startswith("["):
            try:
                close = find_closing(rest, 0)
            except ValueError:
                return None
            if not self.ARRAY_LENGTH_PATTERN.match(rest[1:close]):
                return TypeDeclaration(name=name, kind="generic", underlying=rest)
            return TypeDeclaration(name=name, kind="defined", underlying=rest)

        if rest.startswith("="):
            return TypeDeclaration(name=name, kind="alias", underlying=rest[1:].strip())

        if self.STRUCT_PATTERN.match(rest):
            open_index = rest.index("{")
            try:
                close = find_closing(rest, open_index)
            except ValueError:
                logger.warning(f"Unterminated struct body for type {name}")
                return None
            fields = self._parse_struct_body(rest[open_index + 1:close])
            return TypeDeclaration(name=name, kind="struct", fields=tuple(fields))

        return TypeDeclaration(name=name, kind="defined", underlying=rest)

    def _parse_struct_body(self, body: str) -> List[FieldDescriptor]:
        """Parse the field list of a struct type."""
        fields = []

        for line in split_top_level(body):
            names, type_expr = self._parse_field_definition(line)
            if not names:
                # Embedded fields carry no name of their own
                logger.debug(f"Skipping embedded field: {line}")
                continue
            shape = parse_shape(type_expr)
            for name in names:
                fields.append(FieldDescriptor(name=name, shape=shape))

        return fields

    def _parse_field_definition(self, line: str) -> Tuple[List[str], str]:
        """Split ``A, B Type `tag``` into names and type expression."""
        line = self.TAG_PATTERN.sub("", line).strip()

        match = self.FIELD_PATTERN.match(line)
        if not match:
            return [], line

        names = [name.strip() for name in match.group(1).split(",")]
        return names, match.group(2).strip()
