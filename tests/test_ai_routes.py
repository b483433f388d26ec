import json

from summavoice import ai, config, models
from summavoice.models import OperationStatus, OperationType


def test_paraphrase_records_completed_operation(client, auth_headers, fake_ai, db_session):
    response = client.post(
        "/api/ai/paraphrase",
        json={"text": "The cat sat on the mat.", "tone": "formal", "complexity": "enhance"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["result"] == "Generated text"
    assert "text" not in body
    assert "formal tone and enhance complexity" in fake_ai[0]

    operation = db_session.get(models.Operation, body["operation_id"])
    assert operation.type == OperationType.PARAPHRASE
    assert operation.status == OperationStatus.COMPLETED
    assert operation.output == "Generated text"
    assert operation.meta["output_length"] == len("Generated text")
    assert operation.meta["tone"] == "formal"


def test_summarize_uses_requested_length(client, auth_headers, fake_ai):
    response = client.post(
        "/api/ai/summarize",
        json={"text": "Long text.", "format": "bullet", "length": 1},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert "one sentence" in fake_ai[0]
    assert "bullet format" in fake_ai[0]


def test_summarize_rejects_out_of_range_length(client, auth_headers, fake_ai):
    response = client.post("/api/ai/summarize", json={"text": "Text.", "length": 9}, headers=auth_headers)

    assert response.status_code == 400
    assert fake_ai == []


def test_key_points_are_parsed_and_stored_as_json(client, auth_headers, fake_ai, db_session):
    response = client.post("/api/ai/key-points", json={"text": "Some text.", "count": 3}, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["key_points"] == ["First point", "Second point", "Third point"]
    operation = db_session.get(models.Operation, body["operation_id"])
    assert json.loads(operation.output) == body["key_points"]
    assert operation.meta["points_extracted"] == 3


def test_change_tone_requires_tone(client, auth_headers, fake_ai):
    response = client.post("/api/ai/change-tone", json={"text": "Hello."}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "tone"


def test_change_tone(client, auth_headers, fake_ai):
    response = client.post("/api/ai/change-tone", json={"text": "Hello.", "tone": "cheerful"}, headers=auth_headers)

    assert response.status_code == 200
    assert "cheerful tone" in fake_ai[0]


def test_ai_not_configured_fails_operation(client, auth_headers, db_session, monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_AI_API_KEY", "")
    monkeypatch.setattr(ai, "_client", None)
    response = client.post("/api/ai/paraphrase", json={"text": "Hello."}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["message"] == "AI service is not configured"
    operation = db_session.query(models.Operation).one()
    assert operation.status == OperationStatus.FAILED
    assert operation.output == "AI service is not configured"


def test_document_summarize_echoes_text(client, auth_headers, fake_ai, file_dirs, db_session):
    uploads, _ = file_dirs
    response = client.post(
        "/api/ai/doc/summarize",
        files={"file": ("notes.txt", b"Meeting notes about the launch.", "text/plain")},
        data={"format": "concise", "length": "2"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["text"] == body["result"] == "Generated text"
    assert "Meeting notes about the launch." in fake_ai[0]
    assert list(uploads.iterdir()) == []

    operation = db_session.get(models.Operation, body["operation_id"])
    assert operation.type == OperationType.DOCUMENT_SUMMARIZE
    assert operation.meta["original_name"] == "notes.txt"


def test_document_key_points(client, auth_headers, fake_ai):
    response = client.post(
        "/api/ai/doc/key-points",
        files={"file": ("notes.txt", b"Point one. Point two.", "text/plain")},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert len(response.json()["key_points"]) == 3


def test_document_with_no_text_is_400(client, auth_headers, fake_ai, db_session):
    response = client.post(
        "/api/ai/doc/paraphrase",
        files={"file": ("empty.txt", b"   ", "text/plain")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert fake_ai == []
    assert db_session.query(models.Operation).count() == 0


def test_document_change_tone_requires_tone(client, auth_headers, fake_ai):
    response = client.post(
        "/api/ai/doc/change-tone",
        files={"file": ("notes.txt", b"Hello.", "text/plain")},
        headers=auth_headers,
    )

    assert response.status_code == 400


def test_ai_history_filters_by_type(client, auth_headers, fake_ai):
    client.post("/api/ai/paraphrase", json={"text": "One."}, headers=auth_headers)
    client.post("/api/ai/summarize", json={"text": "Two."}, headers=auth_headers)

    everything = client.get("/api/ai/history", headers=auth_headers).json()
    summaries = client.get("/api/ai/history", params={"type": "summarize"}, headers=auth_headers).json()

    assert everything["pagination"]["total"] == 2
    assert summaries["pagination"]["total"] == 1
    assert summaries["data"][0]["type"] == "summarize"
