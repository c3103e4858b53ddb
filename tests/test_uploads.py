"""Tests for depman.uploads module."""

import logging

import pytest

from depman.core.errors import UploadError
from depman.uploads import save_upload, upload_name


class TestUploadName:
    def test_prefixes_millis_and_replaces_spaces(self):
        assert upload_name("my notes v2.pdf", now_ms=1700000000000) == "1700000000000-my_notes_v2.pdf"

    def test_strips_client_paths(self):
        assert upload_name("C:\\Users\\sam\\report.pdf", now_ms=1) == "1-report.pdf"
        assert upload_name("../../etc/passwd", now_ms=1) == "1-passwd"

    def test_uses_current_time(self):
        name = upload_name("a.txt")
        millis, rest = name.split("-", 1)
        assert rest == "a.txt"
        assert int(millis) > 1_600_000_000_000


class TestSaveUpload:
    def test_writes_file_and_returns_public_url(self, tmp_path):
        upload_dir = tmp_path / "public" / "uploads"

        result = save_upload("Design Doc.pdf", b"%PDF-1.4", upload_dir, now_ms=42)

        assert result.url == "/uploads/42-Design_Doc.pdf"
        assert result.path == upload_dir / "42-Design_Doc.pdf"
        assert result.path.read_bytes() == b"%PDF-1.4"
        assert result.to_dict() == {"url": "/uploads/42-Design_Doc.pdf", "success": True}

    @pytest.mark.parametrize("filename,data", [(None, b"x"), ("", b"x"), ("a.pdf", None), ("..", b"x")])
    def test_no_file_is_client_error(self, tmp_path, filename, data):
        with pytest.raises(UploadError) as excinfo:
            save_upload(filename, data, tmp_path)
        assert excinfo.value.status_code == 400
        assert excinfo.value.message == "No file received."

    def test_write_failure_is_server_error(self, tmp_path, caplog):
        blocker = tmp_path / "uploads"
        blocker.write_text("not a directory")

        with caplog.at_level(logging.ERROR, logger="depman.uploads"):
            with pytest.raises(UploadError) as excinfo:
                save_upload("a.pdf", b"x", blocker)

        assert excinfo.value.status_code == 500
        assert "Upload to" in caplog.text
