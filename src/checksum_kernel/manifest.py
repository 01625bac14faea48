"""
Manifest codec: the flat ``checksum`` line format.

Each line is ``<digest><SPACE><path>\\n`` where the digest field is
exactly DIGEST_LENGTH characters wide. The serialized text is what gets
signed, so serialization MUST be byte-for-byte deterministic for a given
ChecksumMap.
"""

from typing import Iterable

from .digest import DIGEST_LENGTH, ChecksumMap, FileEntry, InMemoryFile, create_checksum_map
from .errors import MalformedManifest


CHECKSUM_FILE_NAME = "checksum"
SIGNATURE_FILE_NAME = "checksum.sig"


def serialize_checksum_map(checksum_map: ChecksumMap) -> str:
    """
    Serialize a ChecksumMap to manifest text, preserving insertion order.

    Paths must not contain a newline; this is not checked.
    """
    return "".join(f"{digest} {path}\n" for path, digest in checksum_map.items())


def parse_checksum_map(data: bytes) -> ChecksumMap:
    """
    Parse manifest bytes back into a ChecksumMap.

    Only newline-terminated lines are read. Trailing text after the final
    newline is ignored rather than rejected; manifests written by
    serialize_checksum_map always end with a newline, so this only matters
    for hand-edited or truncated files.

    Args:
        data: Raw manifest bytes (UTF-8)

    Returns:
        New ordered ChecksumMap

    Raises:
        MalformedManifest: If the bytes are not UTF-8 or any non-empty line
            lacks a space right after the fixed-width digest field
    """
    try:
        raw = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedManifest(
            f"Invalid checksum file: not UTF-8 ({exc.reason})",
            details={"offset": exc.start},
        ) from exc

    result: ChecksumMap = {}

    # The last element is whatever follows the final newline
    lines = raw.split("\n")[:-1]

    for number, line in enumerate(lines, start=1):
        if not line:
            continue

        if len(line) <= DIGEST_LENGTH or line[DIGEST_LENGTH] != " ":
            raise MalformedManifest(
                f"Invalid checksum file: line {number} has no space after the digest field",
                details={"line": number},
            )

        result[line[DIGEST_LENGTH + 1:]] = line[:DIGEST_LENGTH]

    return result


def create_checksum_file(
    files: Iterable[FileEntry],
    max_workers: int | None = None,
) -> InMemoryFile:
    """
    Digest the files and return the serialized manifest as a named payload.

    Args:
        files: Files to include in the manifest, in output order
        max_workers: Forwarded to create_checksum_map

    Returns:
        InMemoryFile named CHECKSUM_FILE_NAME
    """
    checksum_map = create_checksum_map(files, max_workers=max_workers)
    contents = serialize_checksum_map(checksum_map).encode("utf-8")
    return InMemoryFile(path=CHECKSUM_FILE_NAME, contents=contents)
