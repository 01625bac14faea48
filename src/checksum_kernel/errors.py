"""
Error codes and exception types for checksum-kernel.

Every failure surfaced by the kernel carries a typed ErrorCode so that
callers and audit trails can branch on the category without parsing
messages.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Failure categories for signing and verification.
    """
    IO_FAILURE = "IO_FAILURE"
    MALFORMED_MANIFEST = "MALFORMED_MANIFEST"
    MANIFEST_NOT_FOUND = "MANIFEST_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    SIGNATURE_REQUIRED = "SIGNATURE_REQUIRED"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    SIGNING_FAILED = "SIGNING_FAILED"
    BUNDLE_INVALID = "BUNDLE_INVALID"


class ChecksumError(Exception):
    """
    Base class for every terminal failure of a sign or verify operation.
    """
    code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class IOFailure(ChecksumError):
    """Source bytes could not be read to completion."""
    code = ErrorCode.IO_FAILURE


class MalformedManifest(ChecksumError):
    """Manifest bytes violate the fixed line format."""
    code = ErrorCode.MALFORMED_MANIFEST


class ManifestNotFound(ChecksumError):
    """The bundle carries no checksum manifest."""
    code = ErrorCode.MANIFEST_NOT_FOUND


class ValidationFailure(ChecksumError):
    """
    The actual file set does not match the manifest.

    The full categorized report is the exception message; the underlying
    DiffResult is kept on ``diff`` for programmatic access.
    """
    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, diff: Any, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.diff = diff


class SignatureAbsent(ChecksumError):
    """A trust key was supplied but the bundle carries no signature."""
    code = ErrorCode.SIGNATURE_REQUIRED


class SignatureInvalid(ChecksumError):
    """The detached signature does not verify against the trust key."""
    code = ErrorCode.SIGNATURE_INVALID


class SigningError(ChecksumError):
    """A private key could not be loaded, decrypted or used for signing."""
    code = ErrorCode.SIGNING_FAILED


class PassphraseRequired(SigningError):
    """An encrypted private key was loaded without a passphrase."""


class BundleError(ChecksumError):
    """The bundle archive could not be opened or written."""
    code = ErrorCode.BUNDLE_INVALID
