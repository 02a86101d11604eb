"""Unit tests for archive access."""

import zipfile
from io import BytesIO

import pytest

from deck_video.errors import CorruptEntry, ExtractionError, MalformedArchive
from deck_video.ingestion.archive import ArchiveAccessor


def make_zip(entries: dict, compression=zipfile.ZIP_DEFLATED) -> bytes:
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for path, content in entries.items():
            archive.writestr(path, content)
    return buffer.getvalue()


class TestArchiveAccessor:
    """Tests for opening archives and reading entries."""

    def test_rejects_empty_file(self):
        """Empty uploads are malformed archives."""
        with pytest.raises(MalformedArchive):
            ArchiveAccessor().open(b"")

    def test_rejects_non_zip_bytes(self):
        """Arbitrary bytes are malformed archives."""
        with pytest.raises(MalformedArchive) as exc_info:
            ArchiveAccessor().open(b"this is not a presentation")

        assert "could not be read as a presentation archive" in str(exc_info.value)

    def test_absent_entry_is_none(self):
        """Missing entries are not errors."""
        accessor = ArchiveAccessor()
        with accessor.open(make_zip({"a.txt": "hello"})) as handle:
            assert accessor.read_binary(handle, "missing.txt") is None
            assert accessor.read_text(handle, "missing.txt") is None
            assert accessor.read_xml(handle, "missing.xml") is None

    def test_reads_binary_and_text(self):
        """Present entries are returned as bytes or decoded text."""
        accessor = ArchiveAccessor()
        archive = make_zip({"data.bin": b"\x00\x01\x02", "notes.txt": "Grüße"})

        with accessor.open(archive) as handle:
            assert handle.entry_count == 2
            assert "data.bin" in handle
            assert accessor.read_binary(handle, "data.bin") == b"\x00\x01\x02"
            assert accessor.read_text(handle, "notes.txt") == "Grüße"

    def test_reads_xml(self):
        """XML entries are parsed into elements."""
        accessor = ArchiveAccessor()
        with accessor.open(make_zip({"doc.xml": "<root><child>x</child></root>"})) as handle:
            root = accessor.read_xml(handle, "doc.xml")

        assert root.tag == "root"
        assert root.find("child").text == "x"

    def test_malformed_xml_is_corrupt_entry(self):
        """Unparseable XML raises CorruptEntry naming the entry."""
        accessor = ArchiveAccessor()
        with accessor.open(make_zip({"ppt/slides/slide1.xml": "<p:sld><unclosed>"})) as handle:
            with pytest.raises(CorruptEntry) as exc_info:
                accessor.read_xml(handle, "ppt/slides/slide1.xml")

        assert exc_info.value.path == "ppt/slides/slide1.xml"

    def test_invalid_utf8_is_corrupt_entry(self):
        """Text entries must decode as UTF-8."""
        accessor = ArchiveAccessor()
        with accessor.open(make_zip({"bad.txt": b"\xff\xfe\xfa"})) as handle:
            with pytest.raises(CorruptEntry):
                accessor.read_text(handle, "bad.txt")

    def test_checksum_mismatch_is_corrupt_entry(self):
        """Entries failing their CRC check raise CorruptEntry."""
        original = b"A" * 64
        archive = make_zip({"media/image1.png": original}, compression=zipfile.ZIP_STORED)
        damaged = archive.replace(original, b"B" * 64)

        accessor = ArchiveAccessor()
        with accessor.open(damaged) as handle:
            with pytest.raises(CorruptEntry):
                accessor.read_binary(handle, "media/image1.png")

    def test_damaged_local_header_is_corrupt_entry(self):
        """A local header without its signature raises CorruptEntry."""
        data = bytearray(make_zip({"ppt/slides/slide1.xml": "<a/>"}))
        data[0:4] = b"PKxx"

        accessor = ArchiveAccessor()
        with accessor.open(bytes(data)) as handle:
            with pytest.raises(CorruptEntry):
                accessor.read_binary(handle, "ppt/slides/slide1.xml")

    def test_encrypted_entry_is_corrupt_entry(self):
        """Entries flagged as encrypted cannot be read without a password."""
        data = bytearray(make_zip({"ppt/slides/slide1.xml": "<a/>"}))
        directory = data.find(b"PK\x01\x02")
        data[directory + 8] |= 0x01

        accessor = ArchiveAccessor()
        with accessor.open(bytes(data)) as handle:
            with pytest.raises(CorruptEntry) as exc_info:
                accessor.read_binary(handle, "ppt/slides/slide1.xml")

        assert exc_info.value.path == "ppt/slides/slide1.xml"

    def test_unsupported_zip_version_is_malformed(self):
        """Archives needing a newer zip version are malformed archives."""
        data = bytearray(make_zip({"ppt/slides/slide1.xml": "<a/>"}))
        directory = data.find(b"PK\x01\x02")
        data[directory + 6] = 104

        with pytest.raises(MalformedArchive):
            ArchiveAccessor().open(bytes(data))

    def test_shifted_directory_offset_is_extraction_error(self):
        """Header offsets pointing before the archive start never leak as ValueError."""
        from deck_video.ingestion import extract_slides

        data = bytearray(make_zip({"ppt/slides/slide1.xml": "<a/>"}))
        end = data.rfind(b"PK\x05\x06")
        offset = int.from_bytes(data[end + 16 : end + 20], "little")
        data[end + 16 : end + 20] = (offset + 1000).to_bytes(4, "little")

        with pytest.raises(ExtractionError):
            extract_slides(bytes(data))

    def test_entities_are_not_expanded(self):
        """Internal entity declarations are not resolved."""
        xml = (
            '<?xml version="1.0"?><!DOCTYPE r [<!ENTITY e "expanded">]>'
            "<r>&e;</r>"
        )
        accessor = ArchiveAccessor()
        with accessor.open(make_zip({"doc.xml": xml})) as handle:
            root = accessor.read_xml(handle, "doc.xml")

        assert root.text != "expanded"
