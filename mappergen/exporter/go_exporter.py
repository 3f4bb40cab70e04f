"""Generated source writer."""
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class GoExporter:
    """Writes generated source, replacing the target in one step."""

    def export(self, output_file: Path, source: str) -> None:
        """
        Write ``source`` to ``output_file``.

        The content goes to a temporary file in the same directory first,
        so a failure never leaves a half-written output behind.
        """
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=str(output_file.parent), prefix=f".{output_file.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(source)
            os.replace(tmp_name, output_file)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(f"Wrote {output_file} ({len(source)} bytes)")
