"""
Digest and manifest codec tests.

The manifest line format is byte-exact: a 44-character digest, one
space, the path, and a newline.
"""

import base64
import hashlib
from pathlib import Path

import pytest

# Add parent src to path for development
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from checksum_kernel import (
    CHECKSUM_FILE_NAME,
    DIGEST_LENGTH,
    ErrorCode,
    InMemoryFile,
    IOFailure,
    LocalFile,
    MalformedManifest,
    compute_digest,
    create_checksum_file,
    create_checksum_map,
    parse_checksum_map,
    serialize_checksum_map,
)
from checksum_kernel.digest import CHUNK_SIZE


# SHA-256 of the empty string, base64 encoded
EMPTY_DIGEST = "47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="


def _expected_digest(data: bytes) -> str:
    return base64.b64encode(hashlib.sha256(data).digest()).decode("ascii")


class TestComputeDigest:
    """Test single-file digests."""

    def test_empty_content_known_value(self):
        assert compute_digest(InMemoryFile("empty", b"")) == EMPTY_DIGEST

    def test_fixed_length(self):
        """Digests are always exactly DIGEST_LENGTH characters."""
        for size in (0, 1, 31, 32, 33, 1000):
            digest = compute_digest(InMemoryFile("f", b"x" * size))
            assert len(digest) == DIGEST_LENGTH == 44

    def test_deterministic(self):
        """Same content always produces the same digest, whatever the path."""
        assert compute_digest(InMemoryFile("a.txt", b"hi")) == compute_digest(InMemoryFile("b.txt", b"hi"))

    def test_different_content(self):
        assert compute_digest(InMemoryFile("a.txt", b"hi")) != compute_digest(InMemoryFile("a.txt", b"yo"))

    def test_matches_sha256_base64(self):
        assert compute_digest(InMemoryFile("a.txt", b"hi")) == _expected_digest(b"hi")

    def test_local_file_matches_in_memory(self, tmp_path: Path):
        data = b"local contents\n"
        local = tmp_path / "local.txt"
        local.write_bytes(data)

        assert compute_digest(LocalFile("local.txt", local)) == compute_digest(InMemoryFile("local.txt", data))

    def test_local_file_larger_than_chunk(self, tmp_path: Path):
        """Streamed digests cover every chunk."""
        data = bytes(range(256)) * (CHUNK_SIZE // 64)
        local = tmp_path / "big.bin"
        local.write_bytes(data)

        assert len(data) > CHUNK_SIZE
        assert compute_digest(LocalFile("big.bin", local)) == _expected_digest(data)

    def test_unreadable_local_file_raises(self, tmp_path: Path):
        with pytest.raises(IOFailure) as exc_info:
            compute_digest(LocalFile("gone.txt", tmp_path / "gone.txt"))

        assert exc_info.value.code == ErrorCode.IO_FAILURE
        assert exc_info.value.details["path"] == "gone.txt"


class TestCreateChecksumMap:
    """Test batch digesting."""

    def test_preserves_input_order(self):
        files = [InMemoryFile(name, name.encode()) for name in ("z.txt", "a.txt", "m/n.txt")]
        result = create_checksum_map(files)
        assert list(result) == ["z.txt", "a.txt", "m/n.txt"]

    def test_threaded_preserves_input_order(self):
        files = [InMemoryFile(f"file-{i:02d}", str(i).encode() * 1000) for i in range(25, 0, -1)]

        sequential = create_checksum_map(files)
        threaded = create_checksum_map(files, max_workers=4)

        assert list(threaded.items()) == list(sequential.items())

    @pytest.mark.parametrize("max_workers", [None, 4])
    def test_failure_aborts_batch(self, tmp_path: Path, max_workers):
        files = [
            InMemoryFile("a.txt", b"hi"),
            LocalFile("missing.txt", tmp_path / "missing.txt"),
            InMemoryFile("b.txt", b"yo"),
        ]

        with pytest.raises(IOFailure):
            create_checksum_map(files, max_workers=max_workers)

    def test_empty_file_set(self):
        assert create_checksum_map([]) == {}


class TestSerialize:
    """Test manifest serialization."""

    def test_line_format(self):
        text = serialize_checksum_map({"a.txt": EMPTY_DIGEST, "dir/b.txt": EMPTY_DIGEST})
        assert text == f"{EMPTY_DIGEST} a.txt\n{EMPTY_DIGEST} dir/b.txt\n"

    def test_space_after_digest_field(self):
        for line in serialize_checksum_map({"x": EMPTY_DIGEST}).splitlines():
            assert line[DIGEST_LENGTH] == " "

    def test_empty_map(self):
        assert serialize_checksum_map({}) == ""

    def test_create_checksum_file(self):
        payload = create_checksum_file([InMemoryFile("a.txt", b"hi"), InMemoryFile("b.txt", b"yo")])

        assert payload.path == CHECKSUM_FILE_NAME == "checksum"
        assert payload.contents == (
            f"{_expected_digest(b'hi')} a.txt\n{_expected_digest(b'yo')} b.txt\n"
        ).encode("utf-8")


class TestParse:
    """Test manifest parsing."""

    def test_round_trip(self):
        original = {
            "a.txt": _expected_digest(b"hi"),
            "nested/dir/b.txt": _expected_digest(b"yo"),
            "with space.txt": EMPTY_DIGEST,
            "ünïcode.txt": _expected_digest(b"u"),
        }
        parsed = parse_checksum_map(serialize_checksum_map(original).encode("utf-8"))

        assert list(parsed.items()) == list(original.items())

    def test_empty_input(self):
        assert parse_checksum_map(b"") == {}

    def test_final_line_without_newline_is_dropped(self):
        data = f"{EMPTY_DIGEST} a.txt\n{EMPTY_DIGEST} b.txt".encode()
        assert parse_checksum_map(data) == {"a.txt": EMPTY_DIGEST}

    def test_single_unterminated_line_is_dropped(self):
        assert parse_checksum_map(f"{EMPTY_DIGEST} a.txt".encode()) == {}

    def test_empty_lines_are_skipped(self):
        data = f"\n{EMPTY_DIGEST} a.txt\n\n".encode()
        assert parse_checksum_map(data) == {"a.txt": EMPTY_DIGEST}

    def test_missing_space_raises(self):
        data = f"{EMPTY_DIGEST}xa.txt\n".encode()
        with pytest.raises(MalformedManifest) as exc_info:
            parse_checksum_map(data)
        assert exc_info.value.code == ErrorCode.MALFORMED_MANIFEST

    def test_truncated_digest_raises(self):
        data = f"{EMPTY_DIGEST[:40]} a.txt\n".encode()
        with pytest.raises(MalformedManifest):
            parse_checksum_map(data)

    def test_short_line_raises(self):
        with pytest.raises(MalformedManifest):
            parse_checksum_map(b"short\n")

    def test_error_reports_line_number(self):
        data = f"{EMPTY_DIGEST} a.txt\ngarbage-line-that-is-long-enough-to-reach-col-45\n".encode()
        with pytest.raises(MalformedManifest) as exc_info:
            parse_checksum_map(data)
        assert exc_info.value.details["line"] == 2

    def test_not_utf8_raises(self):
        with pytest.raises(MalformedManifest):
            parse_checksum_map(b"\xff\xfe\n")

    def test_repeated_path_keeps_last_digest(self):
        other = _expected_digest(b"other")
        data = f"{EMPTY_DIGEST} a.txt\n{other} a.txt\n".encode()
        assert parse_checksum_map(data) == {"a.txt": other}
