"""
Template Engine - Fills code snippet templates

Supports:
- Variable substitution (${variable})
- Strict mode: unknown variables raise instead of rendering empty
- Indentation of rendered blocks
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class TemplateEngine:
    """Simple template engine for generated Go snippets"""

    # Pattern for variable substitution: ${var_name}
    VARIABLE_PATTERN = re.compile(r'\$\{([^}]+)\}')

    def __init__(self, context: Optional[Dict[str, Any]] = None, strict: bool = True):
        """
        Initialize TemplateEngine

        Args:
            context: Variables shared by every rendered snippet
            strict: Raise KeyError for variables missing from the context
        """
        self.context = context or {}
        self.strict = strict

    def evaluate(self, template: str, **variables: Any) -> str:
        """
        Evaluate a template string

        Args:
            template: Template string (e.g., "func ${name}Ptr(src ${name}) *${name}")
            variables: Values overriding the shared context for this call

        Returns:
            Rendered text
        """
        context = dict(self.context)
        context.update(variables)

        def replace_var(match):
            var_name = match.group(1).strip()
            value = context.get(var_name)

            if value is None:
                if self.strict:
                    raise KeyError(f"Template variable not provided: {var_name}")
                logger.warning(f"Variable not found in context: {var_name}")
                return ""

            return str(value)

        return self.VARIABLE_PATTERN.sub(replace_var, template)

    def update_context(self, **kwargs) -> None:
        """Update template context with keyword arguments"""
        self.context.update(kwargs)

    @staticmethod
    def indent(lines: Iterable[str], depth: int) -> str:
        """Join lines, prefixing each non-empty one with ``depth`` tabs"""
        prefix = "\t" * depth
        return "".join(f"{prefix}{line}\n" if line else "\n" for line in lines)
