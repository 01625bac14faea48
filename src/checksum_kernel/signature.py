"""
Signature adjudication for checksum manifests.

Decides whether a bundle passes, passes with a warning, or fails based on
two facts: whether a detached signature accompanies the manifest, and
whether the caller supplied a trust key. The cryptographic check itself
is delegated to a SignatureVerifier and only runs when both are present.

The signature always covers the exact manifest bytes, never individual
file digests.
"""

import logging
from enum import Enum
from typing import Any, Protocol

from .digest import InMemoryFile
from .errors import SignatureAbsent, SignatureInvalid
from .manifest import SIGNATURE_FILE_NAME

logger = logging.getLogger(__name__)


class SignatureVerdict(str, Enum):
    """Outcome of signature adjudication."""
    NOT_REQUESTED = "NOT_REQUESTED"
    NOT_REQUESTED_BUT_PRESENT = "NOT_REQUESTED_BUT_PRESENT"
    REQUIRED_BUT_ABSENT = "REQUIRED_BUT_ABSENT"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"

    @property
    def passed(self) -> bool:
        return self not in (SignatureVerdict.REQUIRED_BUT_ABSENT, SignatureVerdict.REJECTED)


class SignatureVerifier(Protocol):
    """Cryptographic capability used to check a detached signature."""

    def verify(self, message: bytes, signature: bytes, public_keys: list[bytes]) -> bool:
        ...


class ManifestSigner(Protocol):
    """Cryptographic capability used to produce a detached signature."""

    def sign(self, message: bytes, private_key: Any) -> bytes:
        ...


def adjudicate_signature(
    manifest: bytes,
    signature: bytes | None,
    public_key: bytes | None,
    verifier: SignatureVerifier | None = None,
) -> SignatureVerdict:
    """
    Decide the signature outcome for a manifest.

    Args:
        manifest: Exact manifest bytes as found in the bundle
        signature: Detached signature bytes, or None if the bundle has none
        public_key: Armored trust key supplied by the caller, or None
        verifier: Capability that checks the signature; required only when
            both signature and public_key are present

    Returns:
        SignatureVerdict
    """
    if public_key is None:
        if signature is None:
            return SignatureVerdict.NOT_REQUESTED
        return SignatureVerdict.NOT_REQUESTED_BUT_PRESENT

    if signature is None:
        return SignatureVerdict.REQUIRED_BUT_ABSENT

    if verifier is None:
        raise ValueError("A signature verifier is required to check a signature")

    if verifier.verify(manifest, signature, [public_key]):
        return SignatureVerdict.VERIFIED
    return SignatureVerdict.REJECTED


def enforce_signature_verdict(verdict: SignatureVerdict) -> None:
    """
    Turn a verdict into its side effect: a warning, an exception, or nothing.

    Raises:
        SignatureAbsent: For REQUIRED_BUT_ABSENT
        SignatureInvalid: For REJECTED
    """
    if verdict is SignatureVerdict.NOT_REQUESTED_BUT_PRESENT:
        logger.warning(
            "Bundle signature found but not verified. "
            "Provide a public key to verify the signature."
        )
    elif verdict is SignatureVerdict.REQUIRED_BUT_ABSENT:
        raise SignatureAbsent("Bundle is not signed.")
    elif verdict is SignatureVerdict.REJECTED:
        raise SignatureInvalid(
            "Signature invalid. Couldn't verify the signature against the provided public key."
        )


def sign_checksum_file(
    checksum_file: InMemoryFile,
    private_key: Any,
    signer: ManifestSigner,
) -> InMemoryFile:
    """
    Produce the detached signature payload for a serialized manifest.

    Args:
        checksum_file: Manifest payload from create_checksum_file
        private_key: Decrypted private key handle understood by signer
        signer: Capability that produces the signature

    Returns:
        InMemoryFile named SIGNATURE_FILE_NAME
    """
    signature = signer.sign(checksum_file.contents, private_key)
    return InMemoryFile(path=SIGNATURE_FILE_NAME, contents=signature)
