from unittest.mock import patch

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_index_configuration_renders_503() -> None:
    with patch.dict(
        "os.environ",
        {"TWELVE_LABS_API_KEY": "tl-test", "TWELVE_LABS_INDEX_ID": ""},
        clear=False,
    ):
        response = client.get("/api/videos/vid-1")
    assert response.status_code == 503
    assert response.json() == {
        "error": "Service is not configured.",
        "details": "TWELVE_LABS_INDEX_ID is not set",
    }


def test_invalid_input_renders_message_as_error() -> None:
    response = client.get("/api/clips/download", params={"file": "../../etc/passwd"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid file name."
    assert "path components" in body["details"]
