"""
checksum-kernel: Checksum manifests and detached signatures for file bundles.

Computes per-file SHA-256 digests, serializes them into the flat
``checksum`` manifest, reconciles an extracted bundle against its
manifest, and adjudicates an optional ``checksum.sig`` signature.
"""

__version__ = "0.1.0"

from .digest import (
    DIGEST_LENGTH,
    ChecksumMap,
    FileEntry,
    InMemoryFile,
    LocalFile,
    compute_digest,
    create_checksum_map,
)
from .manifest import (
    CHECKSUM_FILE_NAME,
    SIGNATURE_FILE_NAME,
    create_checksum_file,
    parse_checksum_map,
    serialize_checksum_map,
)
from .reconcile import (
    DiffResult,
    diff_checksum_maps,
    ensure_valid,
    format_validation_report,
)
from .signature import (
    ManifestSigner,
    SignatureVerdict,
    SignatureVerifier,
    adjudicate_signature,
    enforce_signature_verdict,
    sign_checksum_file,
)
from .archive import Bundle, read_bundle, write_bundle
from .sign import SignOptions, attach_payloads, sign_bundle
from .verify import BundleVerification, VerifyOptions, verify_bundle
from .errors import (
    BundleError,
    ChecksumError,
    ErrorCode,
    IOFailure,
    MalformedManifest,
    ManifestNotFound,
    PassphraseRequired,
    SignatureAbsent,
    SignatureInvalid,
    SigningError,
    ValidationFailure,
)

__all__ = [
    # Digests
    "DIGEST_LENGTH",
    "ChecksumMap",
    "FileEntry",
    "InMemoryFile",
    "LocalFile",
    "compute_digest",
    "create_checksum_map",
    # Manifest codec
    "CHECKSUM_FILE_NAME",
    "SIGNATURE_FILE_NAME",
    "create_checksum_file",
    "parse_checksum_map",
    "serialize_checksum_map",
    # Reconciliation
    "DiffResult",
    "diff_checksum_maps",
    "ensure_valid",
    "format_validation_report",
    # Signatures
    "ManifestSigner",
    "SignatureVerdict",
    "SignatureVerifier",
    "adjudicate_signature",
    "enforce_signature_verdict",
    "sign_checksum_file",
    # Bundles
    "Bundle",
    "read_bundle",
    "write_bundle",
    "SignOptions",
    "attach_payloads",
    "sign_bundle",
    "BundleVerification",
    "VerifyOptions",
    "verify_bundle",
    # Errors
    "BundleError",
    "ChecksumError",
    "ErrorCode",
    "IOFailure",
    "MalformedManifest",
    "ManifestNotFound",
    "PassphraseRequired",
    "SignatureAbsent",
    "SignatureInvalid",
    "SigningError",
    "ValidationFailure",
]
