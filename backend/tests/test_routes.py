import json

import httpx
import pytest
from fastapi.testclient import TestClient

from popup_translator.api.dependencies import get_pipeline
from popup_translator.config import settings
from popup_translator.core.translation import TranslationPipeline
from popup_translator.main import app

from helpers import ENDPOINT, Recorder, byte_stream, chat_body, chat_recorder, make_gateway, ndjson_lines


@pytest.fixture
def use_runtime():
    """Route the pipeline to a mocked runtime; returns the recorder setter."""

    def install(recorder: Recorder) -> Recorder:
        pipeline = TranslationPipeline(make_gateway(recorder))
        app.dependency_overrides[get_pipeline] = lambda: pipeline
        return recorder

    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def _sse_events(body: str):
    events = []
    for block in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Popup Translator API"
    assert client.get("/health").json() == {"status": "healthy"}


def test_translate_detects_direction_and_uses_defaults(client, use_runtime):
    recorder = use_runtime(chat_recorder("Good morning"))

    response = client.post("/api/v1/translate", json={"text": "おはようございます"})

    assert response.status_code == 200
    body = response.json()
    assert body["translatedText"] == "Good morning"
    assert body["sourceLang"] == "japanese"
    assert body["targetLang"] == "english"
    assert body["durationMs"] >= 1
    assert recorder.payloads[0]["model"] == settings.ollama_model
    assert str(recorder.requests[0].url).startswith(settings.ollama_endpoint)


def test_translate_honours_explicit_endpoint_and_model(client, use_runtime):
    recorder = use_runtime(chat_recorder("こんにちは"))

    response = client.post(
        "/api/v1/translate",
        json={
            "text": "Hello",
            "sourceLang": "english",
            "targetLang": "japanese",
            "endpoint": ENDPOINT + "/",
            "model": "plamo-2-translate",
        },
    )

    assert response.status_code == 200
    assert str(recorder.requests[0].url) == f"{ENDPOINT}/api/chat"
    assert recorder.payloads[0]["model"] == "plamo-2-translate"


def test_translate_maps_connection_failure_to_503(client, use_runtime):
    def refuse(request):
        raise httpx.ConnectError("refused")

    use_runtime(Recorder(refuse))

    response = client.post("/api/v1/translate", json={"text": "Hello"})
    assert response.status_code == 503
    assert "Ollama is not running" in response.json()["detail"]


def test_translate_stream_emits_chunks_then_complete(client, use_runtime):
    use_runtime(Recorder(lambda request: httpx.Response(200, content=byte_stream(ndjson_lines(["Hel", "lo"])))))

    response = client.post("/api/v1/translate/stream", json={"text": "こんにちは"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = _sse_events(response.text)
    assert [name for name, _ in events] == ["translation-chunk", "translation-chunk", "translation-complete"]
    assert events[1][1] == {"chunk": "lo", "accumulated": "Hello", "done": False}
    assert events[2][1]["translatedText"] == "Hello"
    assert events[2][1]["durationMs"] >= 1


def test_translate_stream_emits_error_event(client, use_runtime):
    use_runtime(Recorder(lambda request: httpx.Response(500, text="kaput")))

    response = client.post("/api/v1/translate/stream", json={"text": "こんにちは"})

    events = _sse_events(response.text)
    assert [name for name, _ in events] == ["translation-error"]
    assert events[0][1]["code"] == "api_error"
    assert "kaput" in events[0][1]["message"]


def test_summarize_small_default_model_is_422(client, use_runtime):
    recorder = use_runtime(chat_recorder("summary"))

    response = client.post("/api/v1/summarize", json={"text": "Some text", "model": "qwen2.5:3b"})

    assert response.status_code == 422
    assert "7B" in response.json()["detail"]
    assert recorder.requests == []


def test_summarize(client, use_runtime):
    use_runtime(chat_recorder("Short summary."))

    response = client.post(
        "/api/v1/summarize",
        json={"text": "A long English text about many things.", "model": "qwen2.5:7b"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == "Short summary."
    assert body["summaryLength"] == len("Short summary.")
    assert body["originalLength"] == len("A long English text about many things.")


def test_reply(client, use_runtime):
    use_runtime(chat_recorder("[Reply]\nThank you.\n\n[Translation]\nありがとうございます。"))

    response = client.post(
        "/api/v1/reply",
        json={
            "text": "Please review the draft.",
            "language": "english",
            "sourceLanguage": "japanese",
            "model": "qwen2.5:7b",
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "reply": "Thank you.",
        "explanation": "ありがとうございます。",
        "language": "english",
        "durationMs": response.json()["durationMs"],
    }


def test_detect_language(client):
    response = client.post("/api/v1/detect-language", json={"text": "Hello"})
    assert response.json() == {"language": "english", "confidence": 0.7}


def test_provider_status_shapes(client, use_runtime):
    use_runtime(Recorder(lambda request: httpx.Response(200, json={"models": []})))
    assert client.get("/api/v1/provider/status").json() == {"status": "available"}

    use_runtime(Recorder(lambda request: httpx.Response(500)))
    assert client.get("/api/v1/provider/status", params={"endpoint": ENDPOINT}).json() == {
        "status": "unavailable",
        "reason": "HTTP error: 500",
    }


def test_provider_preload(client, use_runtime):
    recorder = use_runtime(Recorder(lambda request: httpx.Response(200, json=chat_body("hi"))))
    assert client.post("/api/v1/provider/preload", json={"model": "qwen2.5:7b"}).json() == {"loaded": True}
    assert recorder.payloads[0]["model"] == "qwen2.5:7b"

    use_runtime(Recorder(lambda request: httpx.Response(404)))
    assert client.post("/api/v1/provider/preload").json() == {"loaded": False, "reason": "HTTP error: 404"}


def test_settings_defaults(client):
    body = client.get("/api/v1/settings/defaults").json()
    assert body["endpoint"] == settings.ollama_endpoint
    assert body["model"] == settings.ollama_model
    assert body["keepAlive"] == settings.keep_alive


def test_auth_required_when_enabled(client, monkeypatch):
    monkeypatch.setattr(settings, "api_auth_token", "secret")
    monkeypatch.setattr(settings, "require_auth_all", True)

    assert client.post("/api/v1/detect-language", json={"text": "Hello"}).status_code == 401
    assert (
        client.post(
            "/api/v1/detect-language",
            json={"text": "Hello"},
            headers={"Authorization": "Bearer wrong"},
        ).status_code
        == 401
    )
    ok = client.post("/api/v1/detect-language", json={"text": "Hello"}, headers={"X-API-Key": "secret"})
    assert ok.status_code == 200


def test_malformed_endpoint_maps_to_503_and_stream_error(client, use_runtime):
    recorder = use_runtime(chat_recorder("unused"))
    body = {"text": "Hello", "endpoint": "http://[::1"}

    response = client.post("/api/v1/translate", json=body)
    assert response.status_code == 503
    assert "invalid endpoint" in response.json()["detail"]

    events = _sse_events(client.post("/api/v1/translate/stream", json=body).text)
    assert [name for name, _ in events] == ["translation-error"]
    assert events[0][1]["code"] == "connection_failed"
    assert recorder.requests == []
