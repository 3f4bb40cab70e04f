"""
Mapper configuration loader.

Loads the YAML mapping configuration and parses it into the dataclasses
of ``mappergen.schema.config_models``.

Failure modes:
    * Missing file          -> ConfigurationError
    * Malformed YAML        -> ConfigurationError (parser message kept)
    * Missing required keys -> ConfigurationError naming the mapper and key
    * Invalid or duplicate aliases -> ConfigurationError
"""
import logging
import re
from pathlib import Path
from typing import Any, Dict, List

import yaml

from mappergen.exceptions import ConfigurationError
from mappergen.schema.config_models import (
    ImportEntry,
    MapperConfig,
    MappersConfig,
    RawRelation,
    RelationEntry,
    TypeReference,
)

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z_]\w*$')


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """
    Load a YAML file and return its contents as a dict.

    Raises:
        ConfigurationError: if the file is missing or is not a YAML mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Mapping configuration file {path} not found")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Mapping configuration file format error: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Mapping configuration file {path} must contain a mapping at top level"
        )
    return data


def load_config(path: Path) -> MappersConfig:
    """Load and validate a complete mapper configuration file."""
    path = Path(path)
    data = load_yaml_file(path)

    config = MappersConfig(path=str(path))
    config.imports = [parse_import(entry) for entry in data.get("imports") or []]
    config.mappers = [
        parse_mapper(entry, index) for index, entry in enumerate(data.get("mappers") or [])
    ]

    logger.info(f"Loaded {len(config.mappers)} mappers from {path}")
    return config


def parse_import(data: Any) -> ImportEntry:
    """Parse an ``imports`` entry."""
    if not isinstance(data, dict) or not data.get("path"):
        raise ConfigurationError(f"import entry {data!r} requires a path")
    return ImportEntry(path=str(data["path"]), alias=str(data.get("alias") or ""))


def parse_type_reference(data: Any, label: str, mapper: str) -> TypeReference:
    """Parse a ``{alias, path}`` entry and check the alias is an identifier."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"{label} must be a mapping with alias and path", mapper)

    for key in ("alias", "path"):
        if not data.get(key):
            raise ConfigurationError(f"{label} is missing required key '{key}'", mapper)

    alias = str(data["alias"])
    if not IDENTIFIER_PATTERN.match(alias):
        raise ConfigurationError(f"{label} alias '{alias}' is not a valid identifier", mapper)

    return TypeReference(alias=alias, path=str(data["path"]))


def parse_relation_entry(data: Any, mapper: str) -> RawRelation:
    """Keep string relations as-is, turn mapping relations into RelationEntry."""
    if isinstance(data, str):
        return data

    if isinstance(data, dict):
        if not data.get("field") or not data.get("expr"):
            raise ConfigurationError(
                f"relation {data!r} requires both 'field' and 'expr'", mapper
            )
        guard = data.get("guard")
        return RelationEntry(
            field=str(data["field"]),
            expr=str(data["expr"]),
            guard=str(guard) if guard else None,
        )

    raise ConfigurationError(f"relation {data!r} must be a string or a mapping", mapper)


def parse_mapper(data: Any, index: int) -> MapperConfig:
    """
    Parse one ``mappers`` entry.

    Preconditions:
        - ``destination`` and at least one ``source`` entry, each with
          ``alias`` and ``path``.
    Raises:
        ConfigurationError: naming the mapper index and the offending key.
    """
    label = f"#{index}"
    if not isinstance(data, dict):
        raise ConfigurationError("entry must be a mapping", label)

    if data.get("alias"):
        label = f"#{index} ({data['alias']})"

    if "destination" not in data:
        raise ConfigurationError("missing required key 'destination'", label)
    destination = parse_type_reference(data["destination"], "destination", label)

    raw_sources = data.get("source") or []
    if not isinstance(raw_sources, list) or not raw_sources:
        raise ConfigurationError("requires at least one 'source' entry", label)
    sources = [
        parse_type_reference(entry, f"source[{i}]", label)
        for i, entry in enumerate(raw_sources)
    ]

    _check_aliases(destination, sources, label)

    alias = str(data.get("alias") or "")
    if alias and not IDENTIFIER_PATTERN.match(alias):
        raise ConfigurationError(f"mapper alias '{alias}' is not a valid identifier", label)

    mapping: List[Any] = data.get("map") or []
    if mapping:
        logger.debug(f"Mapper {label}: 'map' entries are reserved and ignored")

    relations = [parse_relation_entry(entry, label) for entry in data.get("relations") or []]

    return MapperConfig(
        destination=destination,
        sources=sources,
        alias=alias,
        mapping=list(mapping),
        relations=relations,
    )


def _check_aliases(destination: TypeReference, sources: List[TypeReference], label: str) -> None:
    """Source aliases must be unique and must differ from the destination alias."""
    seen = set()
    for source in sources:
        if source.alias == destination.alias:
            raise ConfigurationError(
                f"source alias '{source.alias}' clashes with the destination alias", label
            )
        if source.alias in seen:
            raise ConfigurationError(f"duplicate source alias '{source.alias}'", label)
        seen.add(source.alias)
