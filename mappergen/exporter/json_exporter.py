"""JSON exporter."""
import json
from pathlib import Path
from datetime import datetime
from typing import List

from mappergen.mapper.mapping import MappingPlan


class JsonExporter:
    """Export resolved mapping plans to JSON."""

    def export(
        self,
        output_file: Path,
        config_path: str,
        plans: List[MappingPlan],
    ) -> None:
        """Export to JSON file."""
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "metadata": {
                "created_at": datetime.now().isoformat(),
                "config": config_path,
                "mappers": len(plans),
                "unresolved_fields": sum(len(p.unresolved) for p in plans),
            },
            "plans": [p.to_dict() for p in plans],
        }

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
