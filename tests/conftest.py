import json
import os

import pytest


class FakeConn:
    """Socket stand-in that replays chunks, then optionally fails the next read."""

    def __init__(self, chunks, error=None):
        self.chunks = [c for c in chunks if c]
        self.error = error
        self.closed = False

    def recv(self, n):
        if self.chunks:
            chunk = self.chunks.pop(0)
            if len(chunk) > n:
                # like a real socket: never return more than asked for
                self.chunks.insert(0, chunk[n:])
                chunk = chunk[:n]
            return chunk
        if self.error is not None:
            raise self.error
        return b""

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeNotifier:
    def __init__(self):
        self.published = []

    def publish_import(self, identifier, metadata):
        self.published.append((identifier, metadata))
        return True


def stems(directory, suffix):
    return sorted(name[: -len(suffix)] for name in os.listdir(directory) if name.endswith(suffix))


def read_metadata(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def notifier():
    return FakeNotifier()
