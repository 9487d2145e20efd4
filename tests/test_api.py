"""
Tests for the Relationship OS HTTP API.
"""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.services.person_store import Person

pytestmark = pytest.mark.integration


@pytest.fixture
def client(patched_stores):
    """Test client backed by a temporary database."""
    return TestClient(app)


def _add_person(client, name="Ada Lovelace") -> str:
    response = client.post("/api/people", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


class TestPeopleEndpoints:
    """Test people CRUD and detail endpoints."""

    def test_create_trims_name(self, client):
        response = client.post("/api/people", json={"name": "  Grace Hopper  "})

        assert response.status_code == 201
        assert response.json()["name"] == "Grace Hopper"
        assert response.json()["importance"] == 3

    def test_create_rejects_blank_name(self, client):
        response = client.post("/api/people", json={"name": "   "})
        assert response.status_code == 400

    def test_create_rejects_missing_name(self, client):
        response = client.post("/api/people", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"

    def test_detail_with_overdue_cadence(self, client):
        person_id = _add_person(client)
        client.patch(f"/api/people/{person_id}", json={"ideal_contact_frequency_days": 14})
        client.post(f"/api/people/{person_id}/interactions", json={"date": "2024-01-01", "type": "call"})

        response = client.get(f"/api/people/{person_id}", params={"today": "2024-01-20"})

        assert response.status_code == 200
        data = response.json()
        assert data["metrics"] == {
            "last_contact_date": "2024-01-01",
            "days_since_last": 19,
            "next_contact_date": "2024-01-15",
            "days_until_next": -5,
            "is_overdue": True,
        }
        assert data["labels"]["next_contact_relative"] == "5 days overdue"
        assert data["labels"]["last_contact"] == "Jan 1, 2024"
        assert data["labels"]["last_contact_relative"] == "19 days ago"
        assert len(data["interactions"]) == 1

    def test_detail_without_history(self, client):
        person_id = _add_person(client)

        data = client.get(f"/api/people/{person_id}", params={"today": "2024-01-20"}).json()

        assert data["metrics"]["is_overdue"] is False
        assert data["metrics"]["next_contact_date"] is None
        assert data["labels"]["last_contact"] == "—"
        assert data["labels"]["last_contact_relative"] == "No interactions yet"
        assert data["labels"]["next_contact_relative"] == "Log an interaction"
        assert data["voice_notes"] == []

    def test_detail_missing_person(self, client):
        assert client.get("/api/people/nope").status_code == 404

    def test_update_and_clear_frequency(self, client):
        person_id = _add_person(client)

        response = client.patch(
            f"/api/people/{person_id}",
            json={"importance": 5, "context": "Mentor", "ideal_contact_frequency_days": 30},
        )
        assert response.json()["ideal_contact_frequency_days"] == 30
        assert response.json()["importance"] == 5

        response = client.patch(f"/api/people/{person_id}", json={"ideal_contact_frequency_days": 0})
        assert response.json()["ideal_contact_frequency_days"] is None
        assert response.json()["context"] == "Mentor"

    def test_update_rejects_out_of_range_importance(self, client):
        person_id = _add_person(client)
        response = client.patch(f"/api/people/{person_id}", json={"importance": 9})
        assert response.status_code == 400

    def test_update_rejects_frequency_above_bound(self, client):
        person_id = _add_person(client)

        response = client.patch(f"/api/people/{person_id}", json={"ideal_contact_frequency_days": 5_000_000})
        assert response.status_code == 400

        response = client.get("/api/people", params={"today": "2024-01-20"})
        assert response.status_code == 200
        assert response.json()["people"][0]["ideal_contact_frequency_days"] is None

    def test_list_survives_stored_frequency_past_max_date(self, client, patched_stores):
        """Rows written outside the API with huge cadences still list and render."""
        person = patched_stores["people"].add(Person(name="Far Future", ideal_contact_frequency_days=5_000_000))
        client.post(f"/api/people/{person.id}/interactions", json={"date": "2024-01-01"})

        response = client.get("/api/people", params={"today": "2024-01-20", "sort": "next_contact"})
        assert response.status_code == 200
        entry = response.json()["people"][0]
        assert entry["metrics"]["next_contact_date"] is None
        assert entry["metrics"]["days_since_last"] == 19
        assert entry["next_contact_label"] == "Log an interaction"

        detail = client.get(f"/api/people/{person.id}", params={"today": "2024-01-20"})
        assert detail.status_code == 200

    def test_list_overdue_only(self, client):
        overdue_id = _add_person(client, "Overdue Olive")
        _add_person(client, "Fresh Fred")
        client.patch(f"/api/people/{overdue_id}", json={"ideal_contact_frequency_days": 7})
        client.post(f"/api/people/{overdue_id}/interactions", json={"date": "2024-01-01"})

        response = client.get(
            "/api/people",
            params={"today": "2024-01-20", "overdue_only": "true", "sort": "overdue"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["people"][0]["name"] == "Overdue Olive"
        assert data["people"][0]["next_contact_label"] == "12 days overdue"

    def test_list_rejects_unknown_sort(self, client):
        assert client.get("/api/people", params={"sort": "age"}).status_code == 400

    def test_rejects_unknown_interaction_type(self, client):
        person_id = _add_person(client)
        response = client.post(f"/api/people/{person_id}/interactions", json={"type": "telegram"})
        assert response.status_code == 400

    def test_delete_person(self, client):
        person_id = _add_person(client)

        assert client.delete(f"/api/people/{person_id}").status_code == 200
        assert client.get(f"/api/people/{person_id}").status_code == 404
        assert client.delete(f"/api/people/{person_id}").status_code == 404


class TestNotesAndCommitments:
    """Test notes and commitments endpoints."""

    def test_note_lifecycle(self, client):
        person_id = _add_person(client)

        note = client.post(f"/api/people/{person_id}/notes", json={"body": "Has two cats"}).json()
        edited = client.patch(f"/api/notes/{note['id']}", json={"body": "Has three cats"})

        assert edited.status_code == 200
        assert edited.json()["body"] == "Has three cats"
        assert client.delete(f"/api/notes/{note['id']}").status_code == 200
        assert client.patch(f"/api/notes/{note['id']}", json={"body": "x"}).status_code == 404

    def test_commitment_close(self, client):
        person_id = _add_person(client)

        commitment = client.post(
            f"/api/people/{person_id}/commitments",
            json={"description": "Send article", "due_date": "2024-01-22"},
        ).json()
        closed = client.post(f"/api/commitments/{commitment['id']}/close")

        assert closed.status_code == 200
        assert closed.json()["status"] == "closed"
        assert client.post("/api/commitments/nope/close").status_code == 404

    def test_notes_require_existing_person(self, client):
        response = client.post("/api/people/nope/notes", json={"body": "hi"})
        assert response.status_code == 404


class TestVoiceNoteEndpoints:
    """Test voice note upload, playback and deletion."""

    def _upload(self, client, person_id, content=b"OggS-audio", content_type="audio/webm"):
        return client.post(
            f"/api/people/{person_id}/voice-notes",
            files={"file": ("note.webm", content, content_type)},
            params={"duration_seconds": 3},
        )

    def test_upload_list_play_delete(self, client):
        person_id = _add_person(client)

        response = self._upload(client, person_id)
        assert response.status_code == 201
        note = response.json()
        assert note["person_id"] == person_id
        assert note["mime_type"] == "audio/webm"
        assert note["size_bytes"] == len(b"OggS-audio")
        assert note["duration_seconds"] == 3

        listing = client.get(f"/api/people/{person_id}/voice-notes").json()
        assert listing["count"] == 1
        assert listing["voice_notes"][0]["id"] == note["id"]

        audio = client.get(note["audio_url"])
        assert audio.status_code == 200
        assert audio.content == b"OggS-audio"
        assert audio.headers["content-type"].startswith("audio/webm")

        assert client.delete(f"/api/voice-notes/{note['id']}").status_code == 200
        assert client.get(note["audio_url"]).status_code == 404
        assert client.delete(f"/api/voice-notes/{note['id']}").status_code == 404

    def test_rejects_non_audio_upload(self, client):
        person_id = _add_person(client)
        response = self._upload(client, person_id, content=b"hello", content_type="text/plain")
        assert response.status_code == 400

    def test_rejects_empty_upload(self, client):
        person_id = _add_person(client)
        assert self._upload(client, person_id, content=b"").status_code == 400

    def test_requires_existing_person(self, client):
        assert self._upload(client, "nope").status_code == 404
        assert client.get("/api/people/nope/voice-notes").status_code == 404

    def test_missing_file_field_is_validation_error(self, client):
        person_id = _add_person(client)
        response = client.post(f"/api/people/{person_id}/voice-notes")
        assert response.status_code == 400

    def test_deleting_person_removes_audio(self, client, patched_stores):
        person_id = _add_person(client)
        note = self._upload(client, person_id).json()
        stored = patched_stores["voice_notes"].get_by_id(note["id"])

        assert client.delete(f"/api/people/{person_id}").status_code == 200

        assert patched_stores["voice_notes"].get_by_id(note["id"]) is None
        assert not Path(stored.file_path).exists()


class TestReviewEndpoint:
    """Test the weekly review endpoint."""

    def test_review_ranks_open_loops(self, client):
        quiet_id = _add_person(client, "Quiet Quinn")
        busy_id = _add_person(client, "Busy Bea")
        client.post(f"/api/people/{quiet_id}/interactions", json={"date": "2024-01-19"})
        client.post(f"/api/people/{busy_id}/interactions", json={"date": "2024-01-19"})
        client.post(f"/api/people/{busy_id}/commitments", json={"description": "Intro to Sam"})

        response = client.get("/api/review", params={"today": "2024-01-20", "limit": 1})

        assert response.status_code == 200
        items = response.json()["items"]
        assert len(items) == 1
        assert items[0]["name"] == "Busy Bea"
        assert items[0]["score"] == 30 + 1 + 15
        assert items[0]["open_loops_label"] == "1 open loop"

    def test_review_limit_bounds(self, client):
        assert client.get("/api/review", params={"limit": 0}).status_code == 400
