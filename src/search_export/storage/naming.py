"""
Output file naming.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..core.models import ExportFormat


_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(name: str) -> str:
    """Replace characters that are invalid in file names with '_'."""
    return _INVALID_FILENAME_CHARS.sub("_", name)


def build_export_path(
    output_dir: Path,
    index: str,
    export_format: ExportFormat,
    timestamp: Optional[datetime] = None,
) -> Path:
    """
    Build the export file path for an index.

    Filenames: export_{index}_{YYYYmmdd_HHMMSS}.{format}
    """
    timestamp = timestamp or datetime.now()
    filename = f"export_{sanitize_filename(index)}_{timestamp:%Y%m%d_%H%M%S}.{ExportFormat(export_format).value}"
    return Path(output_dir) / filename
