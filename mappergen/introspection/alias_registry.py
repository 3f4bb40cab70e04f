"""Import alias bookkeeping for one generation run."""
import logging
import re
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ImportAliasRegistry:
    """
    Keeps generated import aliases unique across all mappers of a run.

    A fresh registry is created per run and passed to whoever needs it,
    so separate runs never share aliases.

    Usage:
    ```python
    registry = ImportAliasRegistry()
    registry.alias_for("example.com/app/models")      # "models"
    registry.alias_for("example.com/legacy/models")   # "models1"
    registry.alias_for("example.com/app/models")      # "models"
    ```
    """

    INVALID_CHARS = re.compile(r'\W')

    def __init__(self):
        self._paths: Dict[str, str] = {}  # alias -> import path

    def alias_for(self, import_path: str, preferred: Optional[str] = None) -> str:
        """
        Return the alias for an import path, registering it on first use.

        Args:
            import_path: Package import path
            preferred: Alias to try first (usually the declared package name)
        """
        for alias, path in self._paths.items():
            if path == import_path:
                return alias

        default_alias = preferred or self.default_alias(import_path)
        alias = default_alias
        suffix = 1
        while alias in self._paths:
            alias = f"{default_alias}{suffix}"
            suffix += 1

        self._paths[alias] = import_path
        logger.debug(f"Registered import alias {alias} -> {import_path}")
        return alias

    @classmethod
    def default_alias(cls, import_path: str) -> str:
        """Last path segment made into an identifier."""
        segment = import_path.rstrip("/").rsplit("/", 1)[-1]
        alias = cls.INVALID_CHARS.sub("_", segment) or "pkg"
        if alias[0].isdigit():
            alias = f"_{alias}"
        return alias

    def has_path(self, import_path: str) -> bool:
        return import_path in self._paths.values()

    def imports(self) -> List[Tuple[str, str]]:
        """Registered ``(alias, path)`` pairs sorted by alias."""
        return sorted(self._paths.items())

    def __len__(self) -> int:
        return len(self._paths)
