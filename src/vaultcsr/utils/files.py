import os
import tempfile
from pathlib import Path
from typing import Union

from .logging import get_logger

logger = get_logger(__name__)

PRIVATE_FILE_MODE = 0o600


def write_private_file(target_path: Union[str, Path], data: Union[str, bytes], mode: int = PRIVATE_FILE_MODE) -> None:
    """
    Replace `target_path` with `data`, readable only by its owner.

    The content goes into a sibling file that is created with `mode` and only
    then renamed over the target, so the target is never partially written
    and never briefly world-readable.
    """
    target = Path(target_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = data.encode() if isinstance(data, str) else data

    fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            os.fchmod(f.fileno(), mode)
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_name, target)
    except OSError:
        logger.error("Failed to write private file", extra={"path": str(target)})
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise
