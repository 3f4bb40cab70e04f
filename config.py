"""Generator settings."""
import os
from dataclasses import dataclass


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class GeneratorSettings:
    """Defaults for a generation run."""

    config_path: str = "mappers.yml"
    out_path: str = "mappers_gen.go"
    gopath: str = ""
    log_level: str = "WARNING"
    timestamp: bool = False

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Load settings from environment variables."""
        return cls(
            config_path=os.getenv("MAPPERGEN_CONFIG", "mappers.yml"),
            out_path=os.getenv("MAPPERGEN_OUT", "mappers_gen.go"),
            gopath=os.getenv("GOPATH", ""),
            log_level=os.getenv("MAPPERGEN_LOG_LEVEL", "WARNING").upper(),
            timestamp=_truthy(os.getenv("MAPPERGEN_TIMESTAMP", "")),
        )


# Global instance
app_settings = GeneratorSettings.from_env()
