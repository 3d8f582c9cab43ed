import logging
import os

from conftest import FakeConn, read_metadata, stems
from pdfsink.handler import DISCARDED, IMPORTED, handle_connection
from pdfsink.sink import DocumentSink

SCENARIO = b"JOB START\n%PDF-1.4\nBODYBYTES"


def only_pdf(directory):
    names = stems(directory, ".pdf")
    assert len(names) == 1
    return names[0], (directory / f"{names[0]}.pdf").read_bytes()


def test_single_chunk_import(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    result = handle_connection(FakeConn([SCENARIO]), str(tmp_path))

    assert result == IMPORTED
    stem, body = only_pdf(tmp_path)
    assert body == b"BODYBYTES"
    assert stems(tmp_path, ".metadata") == [stem]
    assert read_metadata(tmp_path / f"{stem}.metadata")["version"] == 0
    assert f"Receiving PDF into {stem}.pdf" in caplog.text
    assert "PDF imported." in caplog.text


def test_marker_split_across_chunks_gives_same_output(tmp_path):
    one = tmp_path / "one"
    two = tmp_path / "two"
    one.mkdir()
    two.mkdir()

    handle_connection(FakeConn([SCENARIO]), str(one))
    handle_connection(FakeConn([b"JOB START\n%PD", b"F-1.4\nBODYBYTES"]), str(two))

    assert only_pdf(one)[1] == only_pdf(two)[1] == b"BODYBYTES"


def test_no_marker_leaves_nothing(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    result = handle_connection(FakeConn([b"no marker here at all"]), str(tmp_path))

    assert result == DISCARDED
    assert os.listdir(tmp_path) == []
    assert "PDF discarded." in caplog.text


def test_empty_connection_is_discarded(tmp_path):
    assert handle_connection(FakeConn([]), str(tmp_path)) == DISCARDED
    assert os.listdir(tmp_path) == []


def test_marker_without_body_commits_empty_pdf(tmp_path):
    result = handle_connection(FakeConn([b"\n%PDF-\n"]), str(tmp_path))

    assert result == IMPORTED
    stem, body = only_pdf(tmp_path)
    assert body == b""
    assert read_metadata(tmp_path / f"{stem}.metadata")["type"] == "DocumentType"


def test_metadata_failure_removes_pdf_and_next_connection_works(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    (tmp_path / "blocked.metadata").mkdir()

    result = handle_connection(FakeConn([SCENARIO]), str(tmp_path), new_id=lambda: "blocked")

    assert result == DISCARDED
    assert not (tmp_path / "blocked.pdf").exists()
    assert "PDF receive error" in caplog.text

    assert handle_connection(FakeConn([SCENARIO]), str(tmp_path)) == IMPORTED
    assert only_pdf(tmp_path)[1] == b"BODYBYTES"


def test_payload_length_matches_bytes_after_marker(tmp_path):
    preamble = b"@PJL JOB\n@PJL ENTER LANGUAGE=PDF\n%PDF-1.7\n"
    body = bytes(range(256)) * 40
    result = handle_connection(FakeConn([preamble + body]), str(tmp_path), chunk_size=37)

    assert result == IMPORTED
    assert only_pdf(tmp_path)[1] == body


def test_read_error_in_body_commits_what_was_received(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    conn = FakeConn([b"%PDF-1.4\n", b"part one"], error=ConnectionResetError("reset by peer"))

    assert handle_connection(conn, str(tmp_path)) == IMPORTED
    assert only_pdf(tmp_path)[1] == b"part one"
    assert "reset by peer" in caplog.text


def test_read_error_before_marker_discards(tmp_path):
    conn = FakeConn([b"preamble only\n"], error=ConnectionResetError("reset by peer"))
    assert handle_connection(conn, str(tmp_path)) == DISCARDED
    assert os.listdir(tmp_path) == []


def test_write_error_discards(tmp_path, monkeypatch, caplog):
    caplog.set_level(logging.INFO)

    def failing_write(self, data):
        raise OSError("No space left on device")

    monkeypatch.setattr(DocumentSink, "write", failing_write)
    assert handle_connection(FakeConn([SCENARIO]), str(tmp_path)) == DISCARDED
    assert os.listdir(tmp_path) == []
    assert "No space left on device" in caplog.text


def test_unwritable_directory_is_reported(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    missing = tmp_path / "missing"

    assert handle_connection(FakeConn([SCENARIO]), str(missing)) == DISCARDED
    assert not missing.exists()
    assert "Cannot open file to write the pdf" in caplog.text


def test_notifier_only_told_about_imports(tmp_path, notifier):
    handle_connection(FakeConn([b"nothing to see"]), str(tmp_path), notifier=notifier)
    assert notifier.published == []

    handle_connection(FakeConn([SCENARIO]), str(tmp_path), notifier=notifier)
    stem, _ = only_pdf(tmp_path)
    assert len(notifier.published) == 1
    identifier, metadata = notifier.published[0]
    assert identifier == stem
    assert metadata.visible_name == "PDF import"


class RaisingNotifier:
    def publish_import(self, identifier, metadata):
        raise RuntimeError("broker exploded")


def test_notifier_failure_keeps_import(tmp_path, caplog):
    caplog.set_level(logging.INFO)

    result = handle_connection(FakeConn([SCENARIO]), str(tmp_path), notifier=RaisingNotifier())

    assert result == IMPORTED
    stem, body = only_pdf(tmp_path)
    assert body == b"BODYBYTES"
    assert stems(tmp_path, ".metadata") == [stem]
    assert "Import notification failed: broker exploded" in caplog.text


def test_sink_error_log_names_the_error_code(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    handle_connection(FakeConn([SCENARIO]), str(tmp_path / "missing"))
    assert "FILE_OPEN_ERROR" in caplog.text
