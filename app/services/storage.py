import os
import re
from pathlib import Path, PurePosixPath
from typing import Union
from core.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]

# Characters that are unsafe or invalid in filenames on common filesystems.
INVALID_CHARS_PATTERN = re.compile(r'[<>:"|?*\x00-\x1f]')


def ensure_upload_dir(path: PathLike) -> Path:
    """
    Creates the upload directory if needed and returns its resolved path.
    Raises OSError when the directory cannot be created.
    """
    upload_dir = Path(path)
    upload_dir.mkdir(parents=True, exist_ok=True)
    resolved = upload_dir.resolve()
    logger.info(f"Upload directory is ready: {resolved}")
    return resolved


def write_blob(path: PathLike, data: bytes) -> None:
    """
    Writes the whole payload to `path`, replacing any existing file.
    The parent directory must already exist.
    """
    with open(path, "wb") as f:
        f.write(data)


def sanitize_filename(name: str, replacement: str = "_") -> str:
    """
    Reduces a client-supplied filename to a single safe path component.

    Directory parts are dropped (both '/' and '\\' separators), invalid
    characters are replaced and leading dots are stripped, so the result can
    never point outside the directory it is joined to. Returns an empty
    string when nothing usable remains.
    """
    if not name:
        return ""
    base = PurePosixPath(name.replace("\\", "/")).name
    base = INVALID_CHARS_PATTERN.sub(replacement, base).strip()
    base = base.lstrip(".").strip()
    if base in ("", ".", ".."):
        return ""
    return base


def is_within(directory: PathLike, path: PathLike) -> bool:
    """Returns True when `path` resolves to a location inside `directory`."""
    root = Path(directory).resolve()
    target = Path(path).resolve()
    return target != root and root in target.parents
