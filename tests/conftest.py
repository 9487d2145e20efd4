"""
Pytest configuration and shared fixtures for Relationship OS tests.

Test Categories:
- unit: Fast tests with no I/O (scheduler, ranker, date helpers)
- integration: Tests against a temporary SQLite database or the API

Run categories:
- pytest -m unit              # Pure computation only
- pytest -m "not integration" # Skip database tests
- pytest                      # All tests
"""
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from api.services.commitments import CommitmentStore
from api.services.interaction_store import InteractionStore
from api.services.person_store import PersonStore
from api.services.voice_notes import VoiceNoteStore


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Tests using SQLite or the API")


@pytest.fixture
def temp_db_path():
    """Path to a temporary SQLite database, removed afterwards."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = f.name
    yield path
    Path(path).unlink(missing_ok=True)


@pytest.fixture
def stores(temp_db_path, tmp_path):
    """All stores sharing one temporary database; voice note audio goes to tmp_path."""
    return {
        "people": PersonStore(temp_db_path),
        "interactions": InteractionStore(temp_db_path),
        "commitments": CommitmentStore(temp_db_path),
        "voice_notes": VoiceNoteStore(temp_db_path, str(tmp_path / "voice_notes")),
    }


@pytest.fixture
def patched_stores(stores):
    """Route every store getter to the temporary stores."""
    with patch("api.services.people_directory.get_person_store", return_value=stores["people"]), \
        patch("api.services.people_directory.get_interaction_store", return_value=stores["interactions"]), \
        patch("api.services.weekly_review.get_person_store", return_value=stores["people"]), \
        patch("api.services.weekly_review.get_interaction_store", return_value=stores["interactions"]), \
        patch("api.services.weekly_review.get_commitment_store", return_value=stores["commitments"]), \
        patch("api.routes.people.get_person_store", return_value=stores["people"]), \
        patch("api.routes.people.get_interaction_store", return_value=stores["interactions"]), \
        patch("api.routes.people.get_commitment_store", return_value=stores["commitments"]), \
        patch("api.routes.people.get_voice_note_store", return_value=stores["voice_notes"]), \
        patch("api.routes.voice_notes.get_person_store", return_value=stores["people"]), \
        patch("api.routes.voice_notes.get_voice_note_store", return_value=stores["voice_notes"]):
        yield stores
