"""
Human-readable summaries of verification results.
"""

from typing import Any

from .verify import BundleVerification


def verification_summary(result: BundleVerification, name: str) -> dict[str, Any]:
    """
    Extract the reportable facts of a verification.

    Args:
        result: Successful verification outcome
        name: Bundle name shown to the operator

    Returns:
        Dict with name, file_count, verdict and signature_verified
    """
    return {
        "name": name,
        "file_count": result.file_count,
        "verdict": result.verdict.value,
        "signature_verified": result.signature_verified,
    }


def format_verification_summary(result: BundleVerification, name: str) -> str:
    """
    Format a verification as a single line.

    Returns:
        String like "Bundle checksum is valid: pkg.zip (3 files)"
    """
    s = verification_summary(result, name)
    subject = "signature" if s["signature_verified"] else "checksum"
    noun = "file" if s["file_count"] == 1 else "files"
    return f"Bundle {subject} is valid: {s['name']} ({s['file_count']} {noun})"
