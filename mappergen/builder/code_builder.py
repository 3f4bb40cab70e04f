"""
Code Builder - Orchestrates generation of the mappers source file

Integrates:
- FieldBuilder: per-field statements
- TemplateEngine: snippet templates
- Helper collection: pointer constructors and slice converters actually
  required by the resolved plans, emitted once each
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Set, Tuple

from mappergen.builder.field_builder import FieldBuilder
from mappergen.builder.template_engine import TemplateEngine
from mappergen.mapper.mapping import HelperRequirement, MappingPlan

logger = logging.getLogger(__name__)


@dataclass
class FileConfig:
    """File-level settings for the generated source"""
    package_name: str
    config_path: str
    imports: List[Tuple[str, str]] = field(default_factory=list)  # (alias, path)
    timestamp: Optional[datetime] = None


class GoCodeBuilder:
    """
    Builds the complete generated Go file from mapping plans

    Usage:
    ```python
    builder = GoCodeBuilder()
    source = builder.build(plans, FileConfig(package_name="dto", config_path="mappers.yml"))
    ```
    """

    HEADER_TEMPLATE = (
        "// Code generated by mappergen; DO NOT EDIT.\n"
        "// This file was generated using data from\n"
        "// ${config_path}\n"
    )
    TIMESTAMP_TEMPLATE = "// at ${timestamp}\n"
    PACKAGE_TEMPLATE = "package ${package}\n"
    IMPORT_TEMPLATE = '\t${alias}"${path}"\n'

    POINTER_HELPER_TEMPLATE = (
        "func ${name}(src ${type}) *${type} {\n"
        "\treturn &src\n"
        "}\n"
    )
    SLICE_HELPER_TEMPLATE = (
        "func ${name}(src []${src_elem}) []${dst_elem} {\n"
        "\tif src == nil {\n"
        "\t\treturn nil\n"
        "\t}\n"
        "\tdst := make([]${dst_elem}, len(src))\n"
        "\tfor i := range src {\n"
        "${body}"
        "\t}\n"
        "\treturn dst\n"
        "}\n"
    )

    MAPPER_TEMPLATE = (
        "func ${name}(${params}) (${dst} *${dst_type}) {\n"
        "${body}"
        "\treturn ${dst}\n"
        "}\n"
    )
    SOURCE_BLOCK_TEMPLATE = (
        "\tif ${src} != nil {\n"
        "\t\tif ${dst} == nil {\n"
        "\t\t\t${dst} = ${alloc}\n"
        "\t\t}\n"
        "${rules}"
        "\t}\n"
    )
    DESTINATION_BLOCK_TEMPLATE = (
        "\tif ${dst} != nil {\n"
        "${rules}"
        "\t}\n"
    )
    LIST_MAPPER_TEMPLATE = (
        "func ${name}(${params}) (${dst} []*${dst_type}) {\n"
        "\tcount := len(${first})\n"
        "${min_checks}"
        "\t${dst} = make([]*${dst_type}, 0, count)\n"
        "\tfor i := 0; i < count; i++ {\n"
        "\t\t${dst} = append(${dst}, ${mapper}(${args}))\n"
        "\t}\n"
        "\treturn ${dst}\n"
        "}\n"
    )
    MIN_CHECK_TEMPLATE = (
        "\tif len(${src}) < count {\n"
        "\t\tcount = len(${src})\n"
        "\t}\n"
    )

    def __init__(self, template_engine: Optional[TemplateEngine] = None):
        self.template_engine = template_engine or TemplateEngine()
        self.field_builder = FieldBuilder(self.template_engine)

    def build(self, plans: Sequence[MappingPlan], file_config: FileConfig) -> str:
        """
        Build the whole file

        Args:
            plans: Resolved plans, emitted in the given order
            file_config: Package name, imports and header data

        Returns:
            Generated Go source
        """
        sections = [self.build_header(file_config)]

        imports = self.build_imports(file_config.imports)
        if imports:
            sections.append(imports)

        helpers = self.collect_helpers(plans)
        sections.extend(self.build_helper(helper) for helper in helpers)

        for plan in plans:
            sections.append(self.build_mapper(plan))
            sections.append(self.build_list_mapper(plan))

        logger.info(f"Built {len(plans)} mappers and {len(helpers)} helpers")
        return "\n".join(sections)

    def build_header(self, file_config: FileConfig) -> str:
        """Generated-code notice and package clause"""
        render = self.template_engine.evaluate
        header = render(self.HEADER_TEMPLATE, config_path=file_config.config_path)
        if file_config.timestamp is not None:
            header += render(self.TIMESTAMP_TEMPLATE, timestamp=file_config.timestamp.isoformat())
        return header + "\n" + render(self.PACKAGE_TEMPLATE, package=file_config.package_name)

    def build_imports(self, imports: Sequence[Tuple[str, str]]) -> str:
        """Import block, empty when nothing needs importing"""
        if not imports:
            return ""
        lines = "".join(
            self.template_engine.evaluate(
                self.IMPORT_TEMPLATE, alias=f"{alias} " if alias else "", path=path
            )
            for alias, path in imports
        )
        return f"import (\n{lines})\n"

    @staticmethod
    def collect_helpers(plans: Sequence[MappingPlan]) -> List[HelperRequirement]:
        """Distinct helpers required by all plans, sorted by name"""
        required: Set[HelperRequirement] = set()
        for plan in plans:
            required.update(plan.helpers)
        return sorted(required)

    def build_helper(self, helper: HelperRequirement) -> str:
        """Render a pointer constructor or element-wise slice converter"""
        render = self.template_engine.evaluate

        if helper.kind == "pointer":
            return render(self.POINTER_HELPER_TEMPLATE, name=helper.name, type=helper.target_type)

        value = "*src[i]" if helper.source_ptr else "src[i]"
        converted = f"{helper.target_type}({value})"
        if helper.target_ptr:
            converted = f"{HelperRequirement.pointer(helper.target_type).name}({converted})"

        if helper.source_ptr:
            # nil elements leave the zero value
            body = [
                "if src[i] != nil {",
                f"\tdst[i] = {converted}",
                "}",
            ]
        else:
            body = [f"dst[i] = {converted}"]

        return render(
            self.SLICE_HELPER_TEMPLATE,
            name=helper.name,
            src_elem=f"{'*' if helper.source_ptr else ''}{helper.source_type}",
            dst_elem=f"{'*' if helper.target_ptr else ''}{helper.target_type}",
            body=TemplateEngine.indent(body, 2),
        )

    def build_mapper(self, plan: MappingPlan) -> str:
        """Single-record mapper: one nil-checked block per source"""
        render = self.template_engine.evaluate
        spec = plan.spec
        dst = spec.destination.alias
        dst_type = spec.destination.struct.display_name

        if spec.destination.struct.is_primitive:
            alloc = f"new({dst_type})"
        else:
            alloc = f"&{dst_type}{{}}"

        body = ""
        for binding in spec.sources:
            rules = self.field_builder.build_fields(plan.rules_for_source(binding.alias), dst)
            body += render(
                self.SOURCE_BLOCK_TEMPLATE,
                src=binding.alias,
                dst=dst,
                alloc=alloc,
                rules=TemplateEngine.indent(rules, 2),
            )

        unattributed = plan.unattributed_rules()
        if unattributed:
            rules = self.field_builder.build_fields(unattributed, dst)
            body += render(
                self.DESTINATION_BLOCK_TEMPLATE, dst=dst, rules=TemplateEngine.indent(rules, 2)
            )

        unmapped = [rule for rule in plan.rules if not rule.resolved]
        body += TemplateEngine.indent(self.field_builder.build_fields(unmapped, dst), 1)

        params = ", ".join(f"{b.alias} *{b.struct.display_name}" for b in spec.sources)
        return render(
            self.MAPPER_TEMPLATE,
            name=spec.mapper_name,
            params=params,
            dst=dst,
            dst_type=dst_type,
            body=body,
        )

    def build_list_mapper(self, plan: MappingPlan) -> str:
        """Batch mapper over min(len(sources...)) items"""
        render = self.template_engine.evaluate
        spec = plan.spec
        aliases = [b.alias for b in spec.sources]

        min_checks = "".join(render(self.MIN_CHECK_TEMPLATE, src=alias) for alias in aliases[1:])
        params = ", ".join(f"{b.alias} []*{b.struct.display_name}" for b in spec.sources)

        return render(
            self.LIST_MAPPER_TEMPLATE,
            name=spec.list_mapper_name,
            params=params,
            dst=spec.destination.alias,
            dst_type=spec.destination.struct.display_name,
            first=aliases[0],
            min_checks=min_checks,
            mapper=spec.mapper_name,
            args=", ".join(f"{alias}[i]" for alias in aliases),
        )
