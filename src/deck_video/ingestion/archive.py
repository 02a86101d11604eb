"""Read access to entries of an in-memory presentation archive."""

import zipfile
import zlib
from io import BytesIO

import structlog
from lxml import etree

from deck_video.errors import CorruptEntry, MalformedArchive

logger = structlog.get_logger(__name__)


class ArchiveHandle:
    """An opened archive. Owns the uploaded bytes until closed."""

    def __init__(self, zip_file: zipfile.ZipFile, size_bytes: int):
        self._zip = zip_file
        self._names = set(zip_file.namelist())
        self.size_bytes = size_bytes

    def __contains__(self, path: str) -> bool:
        return path in self._names

    def __enter__(self) -> "ArchiveHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def entry_count(self) -> int:
        return len(self._names)

    def close(self) -> None:
        self._zip.close()

    def read_entry(self, path: str) -> bytes:
        return self._zip.read(path)


class ArchiveAccessor:
    """Open archives and look up their entries by path.

    An absent entry is not an error; lookups return None. A present entry
    that cannot be decompressed, decoded or parsed raises CorruptEntry.
    """

    def __init__(self):
        self._xml_parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            remove_blank_text=False,
        )

    def open(self, file_bytes: bytes) -> ArchiveHandle:
        """Open uploaded file bytes as a zip archive.

        Args:
            file_bytes: Raw content of the uploaded file.

        Returns:
            ArchiveHandle for entry lookups.

        Raises:
            MalformedArchive: If the bytes are not a readable archive.
        """
        if not file_bytes:
            raise MalformedArchive("The file is empty.")

        try:
            zip_file = zipfile.ZipFile(BytesIO(file_bytes))
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            NotImplementedError,
            ValueError,
            OSError,
        ) as e:
            raise MalformedArchive(str(e)) from e

        handle = ArchiveHandle(zip_file, size_bytes=len(file_bytes))
        logger.debug("Opened archive", entries=handle.entry_count, size_bytes=handle.size_bytes)
        return handle

    def read_binary(self, handle: ArchiveHandle, path: str) -> bytes | None:
        """Read an entry as bytes, or None if absent."""
        if path not in handle:
            return None
        # RuntimeError: encrypted entry; ValueError: bad offsets in the headers
        try:
            return handle.read_entry(path)
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,
            ValueError,
            RuntimeError,
        ) as e:
            raise CorruptEntry(path, str(e)) from e

    def read_text(self, handle: ArchiveHandle, path: str) -> str | None:
        """Read an entry as UTF-8 text, or None if absent."""
        content = self.read_binary(handle, path)
        if content is None:
            return None
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptEntry(path, str(e)) from e

    def read_xml(self, handle: ArchiveHandle, path: str) -> etree._Element | None:
        """Read and parse an XML entry, or None if absent."""
        content = self.read_binary(handle, path)
        if content is None:
            return None
        try:
            return etree.fromstring(content, parser=self._xml_parser)
        except etree.XMLSyntaxError as e:
            raise CorruptEntry(path, str(e)) from e
