"""
Key file loading and storage.

Keys are read as opaque armored text; parsing is left to the crypto
capability.
"""

import os
from pathlib import Path

from .errors import IOFailure


def read_key_file(path: str | Path) -> bytes:
    """
    Read an armored key file.

    Raises:
        IOFailure: If the file cannot be read or is empty
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise IOFailure(f"Cannot read key file {path}: {exc}", details={"path": str(path)}) from exc

    if not data.strip():
        raise IOFailure(f"Key file is empty: {path}", details={"path": str(path)})
    return data


def write_private_key_file(path: str | Path, data: bytes) -> Path:
    """
    Write a private key readable only by its owner.

    The file is created with mode 0600, never widened afterwards; an
    existing file at ``path`` is removed first so its mode is not reused.

    Raises:
        IOFailure: If the file cannot be written
    """
    path = Path(path)
    try:
        path.unlink(missing_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise IOFailure(f"Cannot write key file {path}: {exc}", details={"path": str(path)}) from exc
    return path
