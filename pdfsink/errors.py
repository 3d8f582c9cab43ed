"""
errors.py

Exception hierarchy:
- PdfSinkError (base)
  - FileOpenError       payload file cannot be created
  - MetadataWriteError  .metadata sidecar cannot be written
  - ListenerError       port cannot be resolved / bound / listened on
"""

from typing import Any, Dict, Optional


class PdfSinkError(Exception):
    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)


class FileOpenError(PdfSinkError):
    def __init__(self, path: str, message: str = "Cannot open file to write the pdf"):
        super().__init__(message, code="FILE_OPEN_ERROR", details={"path": path})


class MetadataWriteError(PdfSinkError):
    def __init__(self, path: str, message: str = "Failed to write metadata file"):
        super().__init__(message, code="METADATA_WRITE_ERROR", details={"path": path})


class ListenerError(PdfSinkError):
    def __init__(self, port: int, message: str = "Failed to create listening socket"):
        super().__init__(message, code="LISTENER_ERROR", details={"port": port})
