"""
metadata.py

The .metadata sidecar the reMarkable document store (xochitl) expects next
to every document.
"""

import json
import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DOCUMENT_TYPE = "DocumentType"
VISIBLE_NAME = "PDF import"


def now_ms() -> int:
    return int(time.time() * 1000)


class DocumentMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    deleted: bool = False
    # xochitl stores the timestamp as a string of milliseconds
    last_modified: str = Field(alias="lastModified")
    metadatamodified: bool = True
    modified: bool = True
    parent: str = ""  # empty = top level
    pinned: bool = False
    synced: bool = False
    type: str = DOCUMENT_TYPE
    version: int = 0
    visible_name: str = Field(default=VISIBLE_NAME, alias="visibleName")

    @classmethod
    def for_import(cls, timestamp_ms: Optional[int] = None) -> "DocumentMetadata":
        if timestamp_ms is None:
            timestamp_ms = now_ms()
        return cls(last_modified=str(timestamp_ms))

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), indent=4)
