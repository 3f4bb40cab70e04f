"""Factory for creating the appropriate declaration parser."""
import logging
from pathlib import Path

from mappergen.parser.base import DeclarationParser, ParsedSource
from mappergen.parser.go_parser import GoStructParser

logger = logging.getLogger(__name__)


class DeclarationParserFactory:
    """Factory for creating declaration parsers."""

    # Map extensions to parser classes
    PARSERS = {
        'go': GoStructParser,
    }

    @staticmethod
    def create_parser(file_path: str) -> DeclarationParser:
        """
        Create parser based on file extension.

        Args:
            file_path: Path to source file

        Returns:
            DeclarationParser: Appropriate parser instance

        Raises:
            ValueError: If file format is not supported
        """
        ext = DeclarationParser.detect_format(str(file_path))

        parser_class = DeclarationParserFactory.PARSERS.get(ext)
        if parser_class is None:
            raise ValueError(f"Unsupported source format: {ext}")

        return parser_class()

    @staticmethod
    def parse_file(file_path: Path) -> ParsedSource:
        """
        Convenience method to parse a source file in one call.

        Args:
            file_path: Path to source file

        Returns:
            ParsedSource: Parsed declarations
        """
        parser = DeclarationParserFactory.create_parser(str(file_path))

        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        logger.debug(f"Parsing {file_path}")
        return parser.parse(content)
