import io
import os
import re

import fitz
import pytest
from starlette.datastructures import Headers, UploadFile

from summavoice import config, documents
from summavoice.errors import ApiError


def make_upload(filename, content, content_type):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_upload_filename_keeps_extension():
    name = documents.upload_filename("Report.PDF")

    assert re.fullmatch(r"upload-\d+-[0-9a-f-]{36}\.pdf", name)


def test_save_upload_writes_into_uploads_dir(file_dirs):
    uploads, _ = file_dirs
    path = documents.save_upload(make_upload("notes.txt", b"hello", "text/plain"))

    assert os.path.dirname(path) == str(uploads)
    with open(path, "rb") as f:
        assert f.read() == b"hello"


def test_save_upload_rejects_unknown_types():
    with pytest.raises(ApiError) as excinfo:
        documents.save_upload(make_upload("song.mp3", b"ID3", "audio/mpeg"))

    assert excinfo.value.status_code == 400


def test_save_upload_rejects_large_files(file_dirs, monkeypatch):
    uploads, _ = file_dirs
    monkeypatch.setattr(config, "MAX_UPLOAD_SIZE", 4)

    with pytest.raises(ApiError):
        documents.save_upload(make_upload("notes.txt", b"too long", "text/plain"))

    assert list(uploads.iterdir()) == []


def test_extract_pdf_text(tmp_path):
    doc = fitz.open()
    for text in ("Page one text.", "Page two text."):
        doc.new_page().insert_text((72, 72), text)
    path = tmp_path / "two.pdf"
    doc.save(str(path))
    doc.close()

    text, page_count = documents.extract_text(str(path), documents.PDF)

    assert page_count == 2
    assert "Page one text." in text
    assert "Page two text." in text


def test_extract_text_from_plain_text(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Plain words.", encoding="utf-8")

    assert documents.extract_text(str(path), documents.TXT) == ("Plain words.", None)


def test_broken_word_document_is_400(tmp_path):
    path = tmp_path / "broken.docx"
    path.write_bytes(b"not a zip archive")

    with pytest.raises(ApiError) as excinfo:
        documents.extract_text(str(path), documents.DOCX)

    assert excinfo.value.status_code == 400


def test_cleanup_ignores_missing_files(tmp_path):
    documents.cleanup(str(tmp_path / "gone.pdf"))
    documents.cleanup(None)
