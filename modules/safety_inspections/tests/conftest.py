from __future__ import annotations

from datetime import date

import pytest

from modules.safety_inspections.exceptions import PersistenceError
from modules.safety_inspections.models import Finding, InspectionRecord
from modules.safety_inspections.picklists import PickLists
from modules.safety_inspections.repository import InspectionRepository, open_repositories
from modules.safety_inspections.service import InspectionService
from utils.state import AppState

TODAY = date(2024, 5, 15)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("SAFETYHUB_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SAFETYHUB_SEED_DEMO", "0")
    monkeypatch.setenv("SAFETYHUB_LOCALE", "en")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    AppState.clear()
    yield
    AppState.clear()


class FakeTextClient:
    """Stands in for the hosted model; replays canned answers."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.prompts = []

    async def generate_text(self, prompt, *, response_schema=None):
        self.prompts.append((prompt, response_schema))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else ""


class FlakyInspectionRepository(InspectionRepository):
    """Inspection repository whose writes and reads can be made to fail."""

    def __init__(self, store):
        super().__init__(store)
        self.fail_puts = False
        self.fail_reads = False
        self.puts = 0

    async def put(self, item):
        if self.fail_puts:
            raise PersistenceError("disk full", item.id)
        self.puts += 1
        await super().put(item)

    async def get_all(self):
        if self.fail_reads:
            raise PersistenceError("store unreadable")
        return await super().get_all()


@pytest.fixture
def text_client_factory():
    return FakeTextClient


@pytest.fixture
def repos(tmp_path):
    return open_repositories(tmp_path)


@pytest.fixture
def flaky_repo(repos):
    return FlakyInspectionRepository(repos[0].store)


@pytest.fixture
def picklists(tmp_path):
    return PickLists(path=tmp_path / "settings.json")


@pytest.fixture
def inspection_service(flaky_repo, picklists):
    return InspectionService(flaky_repo, picklists=picklists, today=lambda: TODAY)


@pytest.fixture
def make_record():
    def _make(record_id, day, location="Line A", findings=None, inspector="Inspector Lee"):
        if findings is None:
            findings = [Finding.safe("Fire Safety", finding_id=f"{record_id}-f1")]
        return InspectionRecord(
            id=record_id,
            date=day,
            location=location,
            inspector_name=inspector,
            findings=tuple(findings),
        )

    return _make
