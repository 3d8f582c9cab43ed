"""
sink.py

Received document holder. The .pdf is written while the job streams in and
only kept once its .metadata sidecar has been written completely; on any
other way out both files are removed.
"""

import logging
import os
import uuid
from contextlib import contextmanager
from typing import BinaryIO, Callable, Iterator, Optional

from .errors import FileOpenError, MetadataWriteError
from .metadata import DocumentMetadata

logger = logging.getLogger(__name__)


def new_identifier() -> str:
    return str(uuid.uuid4())


class DocumentSink:
    def __init__(self, directory: str, new_id: Callable[[], str] = new_identifier):
        self.directory = directory
        self.identifier = new_id()
        self.metadata: Optional[DocumentMetadata] = None
        self.bytes_written = 0
        self._file: Optional[BinaryIO] = None
        self._committed = False

    @property
    def pdf_path(self) -> str:
        return os.path.join(self.directory, self.identifier + ".pdf")

    @property
    def metadata_path(self) -> str:
        return os.path.join(self.directory, self.identifier + ".metadata")

    @property
    def committed(self) -> bool:
        return self._committed

    def open(self) -> "DocumentSink":
        try:
            self._file = open(self.pdf_path, "wb")
        except OSError as e:
            raise FileOpenError(self.pdf_path, f"Cannot open file to write the pdf: {e}") from e
        return self

    def write(self, data: bytes) -> None:
        if self._file is None:
            raise ValueError("write to a document that is not open")
        self._file.write(data)
        self.bytes_written += len(data)

    def commit(self) -> DocumentMetadata:
        if self._file is None:
            raise ValueError("commit of a document that is not open")
        # metadata first, it can still fail and the pdf is then rolled back
        self.metadata = DocumentMetadata.for_import()
        self._write_metadata(self.metadata)
        try:
            self._file.close()
        except OSError:
            # the pdf gets rolled back by discard(), its sidecar must go too
            self._remove_partial_metadata()
            raise
        self._file = None
        self._committed = True
        return self.metadata

    def discard(self) -> None:
        """Close and delete the .pdf unless it was committed. Safe to call twice."""
        if self._file is None:
            return
        self._file.close()
        self._file = None
        try:
            os.unlink(self.pdf_path)
        except FileNotFoundError:
            pass
        logger.debug("removed uncommitted %s", self.pdf_path)

    def _write_metadata(self, metadata: DocumentMetadata) -> None:
        try:
            # make sure the payload is on disk before it gets a sidecar
            self._file.flush()
            os.fsync(self._file.fileno())
            with open(self.metadata_path, "w", encoding="utf-8") as f:
                f.write(metadata.to_json())
        except OSError as e:
            self._remove_partial_metadata()
            raise MetadataWriteError(self.metadata_path, f"Failed to write metadata file: {e}") from e

    def _remove_partial_metadata(self) -> None:
        try:
            if os.path.isfile(self.metadata_path):
                os.unlink(self.metadata_path)
        except OSError as e:
            logger.warning("could not remove partial %s: %s", self.metadata_path, e)


@contextmanager
def open_document(directory: str, new_id: Callable[[], str] = new_identifier) -> Iterator[DocumentSink]:
    """
    Open a DocumentSink for the block; whatever was not committed when the
    block exits (normally or by exception) is deleted.

    Usage:
        with open_document(dir) as doc:
            doc.write(data)
            doc.commit()
    """
    sink = DocumentSink(directory, new_id).open()
    try:
        yield sink
    finally:
        sink.discard()
