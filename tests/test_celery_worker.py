from summavoice import celery_worker, crud, models
from summavoice.models import OperationStatus, OperationType

from conftest import TestingSessionLocal

OPTIONS = {"voice": "en-us-mike", "language": None, "speed": 0, "format": "16khz_16bit_stereo", "codec": "MP3"}


def _write_upload(directory, content):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "upload-1-test.txt"
    path.write_bytes(content)
    return path


def test_background_task_completes_operation(user, db_session, fake_provider, file_dirs, monkeypatch):
    uploads, output = file_dirs
    monkeypatch.setattr(celery_worker, "SessionLocal", TestingSessionLocal)
    operation = crud.create_operation(db_session, user.id, OperationType.PDF_TO_SPEECH, input_text="notes.txt")
    upload = _write_upload(uploads, b"Read me later.")

    result = celery_worker.process_document_task(operation.id, str(upload), "text/plain", "notes.txt", OPTIONS)

    assert result["status"] == "completed"
    assert not upload.exists()
    assert len(list(output.iterdir())) == 1
    db_session.expire_all()
    stored = db_session.get(models.Operation, operation.id)
    assert stored.status == OperationStatus.COMPLETED
    assert stored.audio_file.id == result["audio_file_id"]
    assert fake_provider.calls == [("Read me later.", "en-us", "mike")]


def test_background_task_records_failure(user, db_session, fake_provider, file_dirs, monkeypatch):
    uploads, _ = file_dirs
    monkeypatch.setattr(celery_worker, "SessionLocal", TestingSessionLocal)
    operation = crud.create_operation(db_session, user.id, OperationType.PDF_TO_SPEECH, input_text="empty.txt")
    upload = _write_upload(uploads, b"   ")

    result = celery_worker.process_document_task(operation.id, str(upload), "text/plain", "empty.txt", OPTIONS)

    assert result == {"status": "failed", "error": "No text could be extracted from the document"}
    assert not upload.exists()
    db_session.expire_all()
    assert db_session.get(models.Operation, operation.id).status == OperationStatus.FAILED


def test_background_task_for_missing_operation(file_dirs, monkeypatch):
    uploads, _ = file_dirs
    monkeypatch.setattr(celery_worker, "SessionLocal", TestingSessionLocal)
    upload = _write_upload(uploads, b"Orphan.")

    result = celery_worker.process_document_task(999, str(upload), "text/plain", "orphan.txt", OPTIONS)

    assert result["status"] == "failed"
    assert not upload.exists()
