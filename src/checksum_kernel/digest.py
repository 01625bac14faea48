"""
Content digests for bundle files.

Uses hashlib for SHA-256. A digest is the standard (padded) base64
encoding of the 32-byte hash, so it is always exactly DIGEST_LENGTH
characters long.
"""

import base64
import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

from .errors import IOFailure

logger = logging.getLogger(__name__)

# Width of the digest field in a manifest line
DIGEST_LENGTH = 44

# Read size for storage-backed files
CHUNK_SIZE = 64 * 1024

# Ordered mapping of relative path -> digest
ChecksumMap = dict[str, str]


@dataclass(frozen=True)
class InMemoryFile:
    """A bundle file whose contents are already held in memory."""
    path: str
    contents: bytes


@dataclass(frozen=True)
class LocalFile:
    """A bundle file that must be streamed from local storage."""
    path: str
    local_path: Path


FileEntry = Union[InMemoryFile, LocalFile]


def _encode(hasher) -> str:
    return base64.b64encode(hasher.digest()).decode("ascii")


def compute_digest(file: FileEntry) -> str:
    """
    Compute the digest of a single file's full contents.

    Args:
        file: In-memory or storage-backed file entry

    Returns:
        44-character base64 SHA-256 digest

    Raises:
        IOFailure: If a storage-backed file cannot be read to completion
    """
    hasher = hashlib.sha256()

    if isinstance(file, InMemoryFile):
        hasher.update(file.contents)
        return _encode(hasher)

    try:
        with open(file.local_path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                hasher.update(chunk)
    except OSError as exc:
        raise IOFailure(
            f"Cannot read {file.path}: {exc}",
            details={"path": file.path, "local_path": str(file.local_path)},
        ) from exc

    return _encode(hasher)


def create_checksum_map(
    files: Iterable[FileEntry],
    max_workers: int | None = None,
) -> ChecksumMap:
    """
    Digest every file and build the path -> digest mapping.

    The mapping preserves input order even when files are digested on a
    thread pool. The first IOFailure aborts the whole batch.

    Args:
        files: Files to digest
        max_workers: Digest on a thread pool of this size when greater than 1

    Returns:
        New ordered ChecksumMap

    Raises:
        IOFailure: If any file cannot be read
    """
    files = list(files)
    logger.debug("Digesting %d files (workers=%s)", len(files), max_workers or 1)

    if not max_workers or max_workers <= 1:
        return {file.path: compute_digest(file) for file in files}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(compute_digest, file) for file in files]
        try:
            digests = [future.result() for future in futures]
        except IOFailure:
            for future in futures:
                future.cancel()
            raise

    return {file.path: digest for file, digest in zip(files, digests)}
