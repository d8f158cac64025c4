"""Integration-style tests for the /videos lifecycle endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import InMemoryStore
from wavepub.controllers.videos import resource_id_from_path
from wavepub.domain import PublishedResource
from wavepub.main import create_app
from wavepub.services.asset_store import StoreError


def _resource(public_id: str) -> PublishedResource:
    return PublishedResource(
        public_id=public_id,
        secure_url=f"https://media.example.com/video/upload/{public_id}.mp4",
        format="mp4",
        bytes=1024,
        folder=public_id.rpartition("/")[0] or None,
    )


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    for public_id in ("audio-waveform-videos/song", "audio-waveform-videos/other", "elsewhere/clip"):
        store.resources[public_id] = _resource(public_id)
    return store


@pytest.fixture
def client(app_settings, store) -> TestClient:
    return TestClient(create_app(app_settings, store=store, configure_logging=False))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("audio-waveform-videos/song", "audio-waveform-videos/song"),
        ("/audio-waveform-videos/song/", "audio-waveform-videos/song"),
        ("audio-waveform-videos//song", "audio-waveform-videos//song"),
        ("song", "song"),
    ],
)
def test_resource_id_from_path(raw, expected):
    assert resource_id_from_path(raw) == expected


def test_list_returns_default_folder_only(client):
    response = client.get("/videos")

    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Success"
    assert sorted(item["public_id"] for item in payload["result"]["resources"]) == [
        "audio-waveform-videos/other",
        "audio-waveform-videos/song",
    ]


def test_get_rejoins_folder_qualified_id(client):
    response = client.get("/videos/audio-waveform-videos/song")

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["public_id"] == "audio-waveform-videos/song"
    assert result["format"] == "mp4"
    assert result["resource_type"] == "video"


def test_get_unknown_id_returns_error_envelope(client):
    response = client.get("/videos/audio-waveform-videos/missing")

    assert response.status_code == 400
    assert response.json() == {
        "message": "Error",
        "error": "Resource not found - audio-waveform-videos/missing",
    }


def test_delete_removes_resource(client, store):
    response = client.delete("/videos/audio-waveform-videos/song")

    assert response.status_code == 200
    assert response.json() == {
        "message": "Success",
        "result": {"deleted": {"audio-waveform-videos/song": "deleted"}},
    }
    assert "audio-waveform-videos/song" not in store.resources
    assert client.get("/videos/audio-waveform-videos/song").status_code == 400


def test_delete_unknown_id_reports_not_found(client):
    response = client.delete("/videos/audio-waveform-videos/missing")

    assert response.status_code == 200
    assert response.json()["result"]["deleted"] == {"audio-waveform-videos/missing": "not_found"}


def test_store_errors_map_to_bad_request(client, store, monkeypatch):
    def broken(prefix):
        raise StoreError("Listing audio-waveform-videos/ failed: AccessDenied")

    monkeypatch.setattr(store, "list", broken)

    response = client.get("/videos")

    assert response.status_code == 400
    assert response.json()["error"] == "Listing audio-waveform-videos/ failed: AccessDenied"


def test_put_is_not_allowed(client):
    response = client.put("/videos/audio-waveform-videos/song")

    assert response.status_code == 405
    assert response.json() == {"message": "Method not allowed"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nowhere")

    assert response.status_code == 404
    assert response.json()["message"] == "Error"


def test_get_keeps_empty_segments_in_id(client):
    response = client.get("/videos/audio-waveform-videos//song")

    assert response.status_code == 400
    assert response.json()["error"] == "Resource not found - audio-waveform-videos//song"
