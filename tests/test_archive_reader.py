"""Tests for archive decoding, destination paths and the sample archive."""

import base64

import pytest

from repopush.core.config import settings
from repopush.exceptions import CorruptArchiveError
from repopush.services.archive_reader import (
    build_sample_archive,
    destination_path,
    encode_content,
    read_archive,
    sample_file_count,
)
from tests.fakes import make_zip


class TestReadArchive:

    def test_returns_files_in_archive_order(self):
        data = make_zip({"b.txt": b"B", "a/c.txt": b"C", "a.txt": b"A"})
        entries = read_archive(data)
        assert [e.path for e in entries] == ["b.txt", "a/c.txt", "a.txt"]
        assert [e.content for e in entries] == [b"B", b"C", b"A"]

    def test_directories_are_dropped(self):
        data = make_zip({"src/main.py": b"print()"}, dirs=("src", "empty"))
        entries = read_archive(data)
        assert [e.path for e in entries] == ["src/main.py"]
        assert not any(e.is_dir for e in entries)

    def test_binary_content_preserved(self):
        payload = bytes(range(256))
        entry = read_archive(make_zip({"blob.bin": payload}))[0]
        assert entry.content == payload
        assert entry.size == 256

    def test_empty_archive(self):
        assert read_archive(make_zip({})) == []

    @pytest.mark.parametrize("data", [b"", b"not a zip at all", b"PK\x03\x04garbage"])
    def test_malformed_bytes(self, data):
        with pytest.raises(CorruptArchiveError):
            read_archive(data)

    def test_truncated_archive(self):
        data = make_zip({"a.txt": b"x" * 1000})
        with pytest.raises(CorruptArchiveError):
            read_archive(data[: len(data) // 2])


class TestDestinationPath:

    def test_preserve_structure_keeps_full_path(self):
        assert destination_path("src/components/Button.jsx", True) == "src/components/Button.jsx"

    def test_flatten_keeps_basename(self):
        assert destination_path("src/components/Button.jsx", False) == "Button.jsx"

    def test_flatten_top_level_file(self):
        assert destination_path("README.md", False) == "README.md"


class TestEncodeContent:

    def test_base64(self):
        assert encode_content(b"hello") == "aGVsbG8="
        assert base64.b64decode(encode_content(b"\x00\xff")) == b"\x00\xff"


class TestSampleArchive:

    def test_is_readable_and_has_no_directories_after_reading(self):
        entries = read_archive(build_sample_archive())
        assert len(entries) == sample_file_count()
        paths = {e.path for e in entries}
        assert "README.md" in paths
        assert "src/components/Button.jsx" in paths
        assert "docs/installation.md" in paths


class TestExpandedSizeBound:

    def test_highly_compressible_archive_over_bound(self):
        data = make_zip({"zeros.bin": b"\x00" * 200_000, "more.bin": b"\x00" * 200_000})
        assert len(data) < 10_000
        with pytest.raises(CorruptArchiveError) as exc_info:
            read_archive(data, max_total_bytes=300_000)
        assert "400000 bytes" in exc_info.value.message

    def test_bound_counts_all_files(self):
        data = make_zip({"a.txt": b"x" * 10, "b.txt": b"y" * 10})
        assert len(read_archive(data, max_total_bytes=20)) == 2
        with pytest.raises(CorruptArchiveError):
            read_archive(data, max_total_bytes=19)

    def test_default_bound_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "max_extracted_bytes", 5)
        with pytest.raises(CorruptArchiveError):
            read_archive(make_zip({"a.txt": b"123456"}))
