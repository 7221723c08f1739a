import json
import shutil
from pathlib import Path

import pytest

from eventcheck.attendee import Attendee, load_attendees
from eventcheck.store import JsonAttendeeStore

TESTS_DIR = Path(__file__).resolve().parent
SAMPLE_ATTENDEES = TESTS_DIR / "sample_attendees.json"
SAMPLE_CONFIG = TESTS_DIR / "sample_console_config.yaml"


def make_attendee(**overrides) -> Attendee:
    """Build an attendee with sensible defaults; keyword overrides use field names."""
    data = {
        "id": "A-1",
        "name": "Pat Example",
        "email": "pat@example.com",
        "registered_at": "2025-01-01T10:00:00Z",
    }
    data.update(overrides)
    return Attendee(**data)


@pytest.fixture
def records():
    return json.loads(SAMPLE_ATTENDEES.read_text(encoding="utf-8"))


@pytest.fixture
def attendees(records):
    return load_attendees(records)


@pytest.fixture
def by_id(attendees):
    return {a.id: a for a in attendees}


@pytest.fixture
def store_path(tmp_path):
    path = tmp_path / "attendees.json"
    shutil.copy(SAMPLE_ATTENDEES, path)
    return path


@pytest.fixture
def store(store_path):
    return JsonAttendeeStore(store_path)
