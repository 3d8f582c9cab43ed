"""
handler.py

Receive one print job from a connected socket and store the PDF found in it.

    HEADER_SEARCH -> BODY_COPY -> imported
          |                 \\-> discarded (write / metadata error)
          \\-> discarded (stream ended before the %PDF- line)
"""

import logging
import socket
from contextlib import ExitStack
from typing import Callable, Iterator, Optional

from .boundary import BoundaryDetector
from .errors import PdfSinkError
from .sink import DocumentSink, new_identifier, open_document

logger = logging.getLogger(__name__)

CHUNK = 1024

IMPORTED = "imported"
DISCARDED = "discarded"


def read_chunks(conn: socket.socket, chunk_size: int = CHUNK) -> Iterator[bytes]:
    """Yield data from `conn` until the peer closes it or the read fails."""
    while True:
        try:
            chunk = conn.recv(chunk_size)
        except OSError as e:
            # a broken read ends the job like a normal close would
            logger.warning("Connection read failed, treating as end of stream: %s", e)
            return
        if not chunk:
            return
        yield chunk


def handle_connection(
    conn: socket.socket,
    directory: str,
    *,
    chunk_size: int = CHUNK,
    new_id: Callable[[], str] = new_identifier,
    notifier=None,
) -> str:
    """
    Copy everything after the %PDF- marker line into <id>.pdf, write
    <id>.metadata and return IMPORTED; return DISCARDED when no marker was
    seen or anything failed on the way (no files are left behind then).
    """
    detector = BoundaryDetector()
    state = "HEADER_SEARCH"  # HEADER_SEARCH, BODY_COPY

    try:
        with ExitStack() as stack:
            doc: Optional[DocumentSink] = None
            for chunk in read_chunks(conn, chunk_size):
                if doc is None:
                    doc = stack.enter_context(open_document(directory, new_id))
                    logger.info("Receiving PDF into %s.pdf", doc.identifier)

                if state == "HEADER_SEARCH":
                    offset = detector.scan(chunk)
                    if offset is None:
                        continue
                    state = "BODY_COPY"
                    chunk = chunk[offset:]

                doc.write(chunk)

            if state != "BODY_COPY":
                logger.info("PDF discarded.")
                return DISCARDED
            metadata = doc.commit()
    except PdfSinkError as e:
        logger.error("PDF receive error [%s]: %s %s", e.code, e, e.details)
        return DISCARDED
    except Exception as e:
        logger.error("PDF receive error: %s", e)
        return DISCARDED

    logger.info("PDF imported. (%s.pdf, %d bytes)", doc.identifier, doc.bytes_written)
    if notifier is not None:
        # the document is already committed, a lost notification only gets logged
        try:
            notifier.publish_import(doc.identifier, metadata)
        except Exception as e:
            logger.error("Import notification failed: %s", e)
    return IMPORTED
