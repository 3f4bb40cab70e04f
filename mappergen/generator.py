"""
Generation pipeline for one run: configuration -> descriptors -> plans -> source.

Nothing is written until every mapper has been resolved, planned and
rendered, so any fatal error leaves the previous output untouched.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from mappergen.builder.code_builder import FileConfig, GoCodeBuilder
from mappergen.exceptions import ConfigurationError, ExportError, TypeResolutionError
from mappergen.exporter.go_exporter import GoExporter
from mappergen.exporter.json_exporter import JsonExporter
from mappergen.introspection.alias_registry import ImportAliasRegistry
from mappergen.introspection.type_resolver import TypeResolver
from mappergen.mapper.mapping import MappingPlan, MappingSpec
from mappergen.mapper.planner import MappingPlanner
from mappergen.parser.config_loader import load_config
from mappergen.schema.config_models import MapperConfig, MappersConfig
from mappergen.schema.models import SourceBinding
from mappergen.validator.plan_validator import PlanValidator

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Everything one run produced."""

    plans: List[MappingPlan]
    source: str = ""
    warnings: List[str] = field(default_factory=list)

    @property
    def resolved_count(self) -> int:
        return sum(len(p.resolved_rules) for p in self.plans)

    @property
    def unresolved_count(self) -> int:
        return sum(len(p.unresolved) for p in self.plans)


class MapperGenerator:
    """Runs the whole pipeline for one configuration file."""

    def __init__(
        self,
        gopath: str = "",
        timestamp: bool = False,
        planner: Optional[MappingPlanner] = None,
        code_builder: Optional[GoCodeBuilder] = None,
        validator: Optional[PlanValidator] = None,
    ):
        self.gopath = gopath
        self.timestamp = timestamp
        self.planner = planner or MappingPlanner()
        self.code_builder = code_builder or GoCodeBuilder()
        self.validator = validator or PlanValidator()

    def plan(
        self, config_path: str, out_path: Optional[str] = None
    ) -> Tuple[MappersConfig, List[MappingPlan], TypeResolver]:
        """
        Load the configuration and resolve a plan per mapper.

        Raises:
            ConfigurationError: Invalid configuration or relations
            TypeResolutionError: A referenced type cannot be resolved
        """
        config = load_config(Path(config_path))

        registry = ImportAliasRegistry()
        resolver = TypeResolver(
            base_dir=Path(config_path).resolve().parent,
            registry=registry,
            gopath=self.gopath,
            local_package_dir=Path(out_path).resolve().parent if out_path else None,
        )

        plans = []
        for mapper in config.mappers:
            spec = self.build_spec(mapper, resolver)
            try:
                plans.append(self.planner.plan(spec))
            except ConfigurationError as e:
                raise ConfigurationError(str(e), spec.mapper_name) from e

        errors = self.validator.validate(plans)
        if errors:
            raise ConfigurationError("; ".join(errors))

        return config, plans, resolver

    @staticmethod
    def build_spec(mapper: MapperConfig, resolver: TypeResolver) -> MappingSpec:
        """Resolve the destination and sources of one configured mapper."""
        name = mapper.mapper_name()
        try:
            destination = SourceBinding(
                alias=mapper.destination.alias,
                struct=resolver.resolve(mapper.destination.path),
            )
            sources = [
                SourceBinding(alias=source.alias, struct=resolver.resolve(source.path), position=i)
                for i, source in enumerate(mapper.sources)
            ]
        except TypeResolutionError as e:
            raise TypeResolutionError(f"mapper {name}: {e}", e.type_path) from e

        return MappingSpec(
            mapper_name=name,
            list_mapper_name=mapper.list_mapper_name(),
            destination=destination,
            sources=sources,
            relations=list(mapper.relations),
        )

    def render(
        self,
        config: MappersConfig,
        plans: List[MappingPlan],
        resolver: TypeResolver,
        out_path: str,
    ) -> str:
        """Render the generated file for already resolved plans."""
        package_dir = Path(out_path).resolve().parent
        file_config = FileConfig(
            package_name=ImportAliasRegistry.default_alias(package_dir.name),
            config_path=config.path,
            imports=self.collect_imports(config, resolver),
            timestamp=datetime.now() if self.timestamp else None,
        )
        return self.code_builder.build(plans, file_config)

    @staticmethod
    def collect_imports(config: MappersConfig, resolver: TypeResolver) -> List[Tuple[str, str]]:
        """Registry imports first (sorted), then configured ones in order."""
        imports = list(resolver.registry.imports())
        seen = {path for _, path in imports}

        for entry in config.imports:
            path = resolver.resolve_import(entry.path)
            if not path or path in seen:
                continue
            seen.add(path)
            imports.append((entry.alias, path))

        return imports

    def generate(
        self,
        config_path: str,
        out_path: str,
        plan_json: Optional[str] = None,
    ) -> GenerationResult:
        """
        Full run: plan, render, then write the optional plan JSON and the output.

        Raises:
            ExportError: The plan JSON or the Go file cannot be written
        """
        config, plans, resolver = self.plan(config_path, out_path)
        source = self.render(config, plans, resolver, out_path)

        # Plan dump first: a failure there leaves the Go output untouched
        try:
            if plan_json:
                JsonExporter().export(Path(plan_json), config.path, plans)
            GoExporter().export(Path(out_path), source)
        except OSError as e:
            raise ExportError(f"cannot write output: {e}") from e

        result = GenerationResult(
            plans=plans, source=source, warnings=self.validator.warnings(plans)
        )
        logger.info(
            f"Generated {len(plans)} mappers into {out_path}: "
            f"{result.resolved_count} fields mapped, {result.unresolved_count} unmapped"
        )
        return result
