"""Pytest configuration and fixtures"""

import asyncio
import json

import pytest

from jurisai.db.sqlite_client import SQLiteStore
from jurisai.models import Matter, MatterType
from jurisai.services.ingestion import FileIngestion
from jurisai.services.invoker import GenerationInvoker


@pytest.fixture(autouse=True)
def test_env(tmp_path, monkeypatch):
    """Set up test environment with temporary database and file directories"""
    monkeypatch.setenv("DB_MODE", "sqlite")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")

    yield


class Held:
    """A reply the fake model only returns once `release` is set."""

    def __init__(self, reply):
        self.reply = reply
        self.release = asyncio.Event()


class FakeModel:
    """Stands in for the model call behind GenerationInvoker.

    Replies are consumed in order: str is returned as-is, dict/list is
    JSON-encoded, an Exception is raised, a Held waits for its event.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    async def __call__(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        reply = self.replies.pop(0) if self.replies else "Generated text"
        if isinstance(reply, Held):
            await reply.release.wait()
            reply = reply.reply
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, (dict, list)):
            return json.dumps(reply)
        return reply

    @property
    def last_prompt(self) -> str:
        return self.calls[-1][0]

    @property
    def last_kwargs(self) -> dict:
        return self.calls[-1][1]


@pytest.fixture
def store():
    return SQLiteStore()


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def invoker(model):
    return GenerationInvoker(call=model)


@pytest.fixture
def ingestion(tmp_path):
    return FileIngestion(upload_dir=str(tmp_path / "uploads"))


def create_matter(store, **overrides) -> Matter:
    data = {
        "name": "Smith v Jones",
        "client": "Alice Smith",
        "court": "County Court at Central London",
        "matter_type": MatterType.CIVIL_LITIGATION.value,
        "status": "Active",
        "description": "The defendant failed to repair a leaking roof despite notice.",
        "opposing_party": "Bob Jones",
    }
    data.update(overrides)
    return Matter.model_validate(store.create("Matter", data))


@pytest.fixture
def matter(store):
    return create_matter(store)


def create_authority(store, matter_id=None, **overrides) -> dict:
    data = {
        "title": "Donoghue v Stevenson",
        "citation": "[1932] AC 562",
        "court": "House of Lords",
        "year": "1932",
        "authority_type": "Case Law",
        "legal_principle": "A manufacturer owes a duty of care to the ultimate consumer",
        "validity": "Active",
    }
    if matter_id:
        data["matter_id"] = matter_id
    data.update(overrides)
    return store.create("LegalAuthority", data)
