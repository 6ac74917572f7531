"""Shared fixtures: in-memory storage and fake collaborators"""

from datetime import date

import pytest

from src.ai_agent.mock_llm_client import MockLLMClient
from src.api.flask_server import MeetingMaestroAPI
from src.notifications.email_sender import RecordingEmailSender
from src.scheduler.day_view import DayView
from src.scheduler.slot_assignment import SlotPicker
from src.storage.key_value_storage import InMemoryStorage
from src.storage.meeting_store import Meeting, MeetingStore

JUNE_3 = date(2024, 6, 3)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return MeetingStore(storage)


@pytest.fixture
def picker(store):
    return SlotPicker(store)


@pytest.fixture
def day_view(store):
    return DayView(store)


@pytest.fixture
def make_meeting():
    def _make(title="Standup", day=JUNE_3, time="09:00", participants=None, description=""):
        if participants is None:
            participants = ["a@x.com"]
        return Meeting(title=title, date=day, time=time, participants=participants, description=description)

    return _make


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def llm_client():
    return MockLLMClient()


@pytest.fixture
def api(store, llm_client, email_sender):
    return MeetingMaestroAPI(store=store, llm_client=llm_client, email_sender=email_sender)


@pytest.fixture
def client(api):
    api.app.testing = True
    return api.app.test_client()
