"""
File I/O utility module
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def ensure_directory(path: Path) -> None:
    """Create directory if it doesn't exist"""
    path.mkdir(parents=True, exist_ok=True)


def read_json_file(file_path: Path) -> Any:
    """
    Read JSON data from file

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the content is not valid JSON
    """
    with open(file_path, encoding="utf-8") as f:
        return json.load(f)


def write_json_file(file_path: Path, data: Any) -> None:
    """
    Write JSON data to file atomically

    The data is written to a temporary file in the same directory and moved
    over the target, so readers never see a half written file.

    Raises:
        OSError: If the file cannot be written
    """
    file_path = Path(file_path)
    ensure_directory(file_path.parent)

    fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, file_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

