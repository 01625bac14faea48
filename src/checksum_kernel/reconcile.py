"""
Reconciliation of an expected manifest against an actual file set.

Produces three disjoint path categories (mismatched, missing, unexpected)
and a single report listing all of them, so an operator sees the complete
picture in one failure.
"""

import hmac
from dataclasses import dataclass
from typing import Any

from .digest import ChecksumMap
from .errors import ValidationFailure


@dataclass(frozen=True)
class DiffResult:
    """
    Difference between an expected and an actual ChecksumMap.

    Paths are kept in encounter order so reports are reproducible.
    """
    mismatched: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    unexpected: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not (self.mismatched or self.missing or self.unexpected)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "mismatched": list(self.mismatched),
            "missing": list(self.missing),
            "unexpected": list(self.unexpected),
        }


def _safe_equal(left: str, right: str) -> bool:
    """Constant-time digest comparison."""
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def diff_checksum_maps(expected: ChecksumMap, actual: ChecksumMap) -> DiffResult:
    """
    Compare an expected ChecksumMap against an actual one.

    A path present in both with equal digests lands in no category; every
    other path lands in exactly one.

    Args:
        expected: Mapping parsed from the bundle's manifest
        actual: Mapping freshly computed from the bundle's files

    Returns:
        DiffResult
    """
    mismatched: list[str] = []
    missing: list[str] = []
    unexpected: list[str] = []

    for path, digest in expected.items():
        actual_digest = actual.get(path)

        if actual_digest is None:
            missing.append(path)
        elif not _safe_equal(actual_digest, digest):
            mismatched.append(path)

    for path in actual:
        if path not in expected:
            unexpected.append(path)

    return DiffResult(
        mismatched=tuple(mismatched),
        missing=tuple(missing),
        unexpected=tuple(unexpected),
    )


def _section(title: str, paths: tuple[str, ...]) -> str:
    listing = "\n".join(f"  {path}" for path in paths)
    return f"The following files are {title}:\n{listing}"


def format_validation_report(diff: DiffResult) -> str:
    """
    Render every non-empty category of a DiffResult as one report.

    Returns an empty string for a valid diff.
    """
    sections: list[str] = []

    if diff.mismatched:
        sections.append(_section("corrupt", diff.mismatched))

    if diff.missing:
        sections.append(_section("missing", diff.missing))

    if diff.unexpected:
        sections.append(_section("unexpected", diff.unexpected))

    if not sections:
        return ""

    return "Validation failed\n\n" + "\n\n".join(sections)


def ensure_valid(diff: DiffResult) -> None:
    """
    Raise ValidationFailure with the full report when the diff is not empty.
    """
    if diff.valid:
        return

    raise ValidationFailure(
        format_validation_report(diff),
        diff=diff,
        details=diff.to_dict(),
    )
