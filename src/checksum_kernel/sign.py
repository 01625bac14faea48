"""
Bundle signing for checksum-kernel.

Produces the ``checksum`` manifest for a file set and, when a private
key is supplied, a ``checksum.sig`` detached signature over the exact
manifest bytes.

SECURITY: Private keys and their passphrases are supplied by the caller.
Never hardcode or commit them.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .crypto import CryptographySigner
from .digest import FileEntry, InMemoryFile
from .manifest import CHECKSUM_FILE_NAME, SIGNATURE_FILE_NAME, create_checksum_file
from .signature import ManifestSigner, sign_checksum_file

logger = logging.getLogger(__name__)


@dataclass
class SignOptions:
    """Options for signing a bundle."""
    max_workers: int | None = None


def sign_bundle(
    files: Iterable[FileEntry],
    private_key: Any = None,
    signer: ManifestSigner | None = None,
    options: SignOptions | None = None,
) -> list[InMemoryFile]:
    """
    Build the manifest payload and, optionally, its detached signature.

    Args:
        files: Files to cover, in manifest order
        private_key: Decrypted private key handle; no signature without it
        signer: Signature capability (default: CryptographySigner)
        options: Digest options

    Returns:
        [checksum] or [checksum, checksum.sig]

    Raises:
        IOFailure: If a file cannot be read
        SigningError: If the key cannot be used for signing
    """
    options = options or SignOptions()
    checksum = create_checksum_file(files, max_workers=options.max_workers)

    if private_key is None:
        return [checksum]

    signature = sign_checksum_file(checksum, private_key, signer or CryptographySigner())
    logger.debug("Signed manifest (%d bytes)", len(checksum.contents))
    return [checksum, signature]


def attach_payloads(
    files: Iterable[InMemoryFile],
    payloads: Iterable[InMemoryFile],
) -> list[InMemoryFile]:
    """
    Return a new file list with payloads appended.

    Any existing manifest or signature entries are dropped first, so
    re-signing a bundle never leaves a stale checksum behind. Does not
    mutate the inputs.
    """
    reserved = {CHECKSUM_FILE_NAME, SIGNATURE_FILE_NAME}
    kept = [file for file in files if file.path.lower() not in reserved]
    return kept + list(payloads)
