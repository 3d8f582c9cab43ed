"""
boundary.py

Finds where the PDF payload starts inside a raw print stream that arrives
in arbitrary chunks. Only the beginning of the current (unfinished) line is
carried over between chunks, so the whole job is never held in memory.
"""

from typing import Optional

MARKER = b"%PDF-"
# how many bytes of an unfinished line we keep for the next chunk
MAX_CARRY = 1024

_NL = b"\n"
_LINE_MARKER = _NL + MARKER


class BoundaryDetector:
    def __init__(self, max_carry: int = MAX_CARRY):
        self.max_carry = max_carry
        # always starts with "\n" so the stream start counts as a line start
        self.carry = _NL
        self.state = "SEARCHING"  # SEARCHING, FOUND

    @property
    def found(self) -> bool:
        return self.state == "FOUND"

    def scan(self, chunk: bytes) -> Optional[int]:
        """
        Return the offset in `chunk` where the payload begins, or None if the
        marker line has not been seen (completely) yet.

        The payload begins right after the newline terminating the marker
        line, so the marker line itself is never part of the payload.
        """
        if self.found:
            raise RuntimeError("payload start already found for this stream")
        if not chunk:
            return None

        text = self.carry + chunk
        # first line start, always 0 thanks to the carried "\n"
        pos = text.find(_NL)

        while True:
            next_nl = text.find(_NL, pos + 1)
            if next_nl == -1:
                # line not finished in this chunk (marker line included),
                # keep its beginning and wait for more data
                self.carry = text[pos:pos + self.max_carry]
                return None

            if text.startswith(_LINE_MARKER, pos):
                offset = next_nl + 1 - len(self.carry)
                self.carry = b""
                self.state = "FOUND"
                return offset

            pos = next_nl
