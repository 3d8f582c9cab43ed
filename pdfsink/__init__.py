"""
pdfsink - receive raw print jobs over TCP and store the embedded PDF
together with a reMarkable-style .metadata sidecar.
"""

from .boundary import BoundaryDetector
from .errors import FileOpenError, ListenerError, MetadataWriteError, PdfSinkError
from .handler import handle_connection
from .sink import DocumentSink, open_document

__version__ = "0.2.0"

__all__ = [
    "BoundaryDetector",
    "DocumentSink",
    "FileOpenError",
    "ListenerError",
    "MetadataWriteError",
    "PdfSinkError",
    "handle_connection",
    "open_document",
]
