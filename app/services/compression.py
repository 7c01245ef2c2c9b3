import gzip
import shutil
from pathlib import Path
from core.logger import get_logger

logger = get_logger(__name__)


def compress_file(input_path, output_path) -> Path:
    """Writes a gzip-compressed copy of `input_path` to `output_path`."""
    output_path = Path(output_path)
    with open(input_path, "rb") as src, gzip.open(output_path, "wb") as dst:
        shutil.copyfileobj(src, dst)
    logger.info(f"File compressed successfully: {output_path}")
    return output_path
