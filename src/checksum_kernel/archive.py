"""
Zip bundle reading and writing.

A bundle is a zip archive whose regular entries are the distributed
files, plus an optional ``checksum`` manifest and ``checksum.sig``
detached signature at the archive root. Those two entries are matched
case-insensitively and kept out of the regular file list.
"""

import os
import re
import shutil
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .digest import InMemoryFile
from .errors import BundleError, IOFailure

_CHECKSUM_ENTRY = re.compile(r"^checksum$", re.IGNORECASE)
_SIGNATURE_ENTRY = re.compile(r"^checksum\.sig$", re.IGNORECASE)


@dataclass
class Bundle:
    """Decoded contents of a bundle archive."""
    files: list[InMemoryFile] = field(default_factory=list)
    checksum: bytes | None = None
    signature: bytes | None = None


def read_bundle(path: str | Path) -> Bundle:
    """
    Read every entry of a zip bundle into memory.

    Args:
        path: Bundle archive path

    Returns:
        Bundle with regular files in archive order

    Raises:
        IOFailure: If the archive cannot be read
        BundleError: If the file is not a zip archive or an entry is
            encrypted or uses an unsupported compression method
    """
    path = Path(path)
    bundle = Bundle()

    try:
        with zipfile.ZipFile(path, "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue

                contents = zf.read(info)

                if _CHECKSUM_ENTRY.match(info.filename):
                    bundle.checksum = contents
                elif _SIGNATURE_ENTRY.match(info.filename):
                    bundle.signature = contents
                else:
                    bundle.files.append(InMemoryFile(path=info.filename, contents=contents))
    except zipfile.BadZipFile as exc:
        raise BundleError(f"Not a zip bundle: {path} ({exc})", details={"path": str(path)}) from exc
    # zipfile raises RuntimeError for encrypted entries and
    # NotImplementedError for unsupported compression methods
    except (RuntimeError, NotImplementedError) as exc:
        raise BundleError(f"Cannot extract bundle {path}: {exc}", details={"path": str(path)}) from exc
    except OSError as exc:
        raise IOFailure(f"Cannot read bundle {path}: {exc}", details={"path": str(path)}) from exc

    return bundle


def write_bundle(path: str | Path, files: Iterable[InMemoryFile]) -> Path:
    """
    Write payloads into a zip bundle, replacing any existing file.

    The archive is written to a temporary file beside ``path`` and moved
    into place only once complete, so a failed write leaves the previous
    bundle untouched.

    Raises:
        IOFailure: If the archive cannot be written
    """
    path = Path(path)

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise IOFailure(f"Cannot write bundle {path}: {exc}", details={"path": str(path)}) from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(raw, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for file in files:
                zf.writestr(file.path, file.contents)

        if path.exists():
            shutil.copymode(path, tmp_path)
        else:
            tmp_path.chmod(0o644)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise IOFailure(f"Cannot write bundle {path}: {exc}", details={"path": str(path)}) from exc
    finally:
        if tmp_path.exists():
            tmp_path.unlink()

    return path
