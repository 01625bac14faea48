"""
Bundle verification pipeline for checksum-kernel.

Stages run in order and the first failing stage ends verification:

1. parse the bundle's manifest
2. digest the bundle's files
3. reconcile expected against actual (reports every difference at once)
4. adjudicate the detached signature

Signature checking never runs for a bundle whose files do not match its
manifest: a valid signature over a manifest says nothing about the files
that were actually delivered.
"""

import logging
from dataclasses import dataclass, field

from .archive import Bundle
from .crypto import CryptographyVerifier
from .digest import create_checksum_map
from .errors import ManifestNotFound
from .manifest import parse_checksum_map
from .reconcile import DiffResult, diff_checksum_maps, ensure_valid
from .signature import (
    SignatureVerdict,
    SignatureVerifier,
    adjudicate_signature,
    enforce_signature_verdict,
)

logger = logging.getLogger(__name__)


@dataclass
class VerifyOptions:
    """Options for verifying a bundle."""
    public_key: bytes | None = None
    max_workers: int | None = None


@dataclass(frozen=True)
class BundleVerification:
    """Outcome of a successful bundle verification."""
    verdict: SignatureVerdict
    file_count: int
    diff: DiffResult = field(default_factory=DiffResult)

    @property
    def valid(self) -> bool:
        return self.diff.valid and self.verdict.passed

    @property
    def signature_verified(self) -> bool:
        return self.verdict is SignatureVerdict.VERIFIED


def verify_bundle(
    bundle: Bundle,
    options: VerifyOptions | None = None,
    verifier: SignatureVerifier | None = None,
) -> BundleVerification:
    """
    Verify a decoded bundle against its manifest and optional signature.

    Args:
        bundle: Decoded bundle (files plus manifest and signature payloads)
        options: Trust key and digest options (default: no trust key)
        verifier: Signature capability (default: CryptographyVerifier)

    Returns:
        BundleVerification for a bundle that passed every stage

    Raises:
        ManifestNotFound: If the bundle has no manifest
        MalformedManifest: If the manifest violates the line format
        IOFailure: If a file cannot be read
        ValidationFailure: If files are corrupt, missing or unexpected
        SignatureAbsent: If a trust key was given but the bundle is unsigned
        SignatureInvalid: If the signature does not verify
    """
    options = options or VerifyOptions()

    if bundle.checksum is None:
        raise ManifestNotFound("Checksum file not found")

    logger.debug("Parsing manifest (%d bytes)", len(bundle.checksum))
    expected = parse_checksum_map(bundle.checksum)

    actual = create_checksum_map(bundle.files, max_workers=options.max_workers)

    diff = diff_checksum_maps(expected, actual)
    ensure_valid(diff)

    if verifier is None and options.public_key is not None:
        verifier = CryptographyVerifier()

    verdict = adjudicate_signature(bundle.checksum, bundle.signature, options.public_key, verifier)
    logger.debug("Signature verdict: %s", verdict.value)
    enforce_signature_verdict(verdict)

    logger.info("Bundle verified: %d files, signature %s", len(bundle.files), verdict.value)
    return BundleVerification(verdict=verdict, file_count=len(bundle.files), diff=diff)
