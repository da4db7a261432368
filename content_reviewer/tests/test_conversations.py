from __future__ import annotations

import json
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from content_reviewer.client.conversations import NEW_CONVERSATION_TITLE, ConversationService
from content_reviewer.repositories.conversation_repository import ConversationRepository


# -----------------------------
# Test doubles
# -----------------------------
class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class Counter:
    def __init__(self):
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return f"conv-{self.n}"


def _service(path: Path) -> ConversationService:
    return ConversationService(ConversationRepository(path), clock=FakeClock(datetime(2024, 5, 1, 9, 0, 0)), new_id=Counter())


def test_initialize_with_no_history_creates_a_conversation(tmp_path: Path):
    svc = _service(tmp_path / "history.json")

    current = svc.initialize()

    assert current.id == "conv-1"
    assert current.title == NEW_CONVERSATION_TITLE
    assert (tmp_path / "history.json").exists()


def test_first_user_message_sets_title(tmp_path: Path):
    svc = _service(tmp_path / "history.json")
    svc.initialize()

    svc.add_message("x" * 60, "user")
    svc.add_message("A reply", "bot")
    svc.add_message("Second question", "user")

    assert svc.current.title == "x" * 50 + "..."
    assert [m.role for m in svc.current.messages] == ["user", "bot", "user"]


def test_history_round_trips_through_the_file(tmp_path: Path):
    path = tmp_path / "history.json"
    svc = _service(path)
    svc.initialize()
    svc.add_message("Review my guidance page", "user")

    reloaded = _service(path)
    current = reloaded.initialize()

    assert current.title == "Review my guidance page"
    assert current.messages[0].content == "Review my guidance page"


def test_most_recent_conversation_becomes_current(tmp_path: Path):
    svc = _service(tmp_path / "history.json")
    svc.initialize()
    newest = svc.create_conversation()

    assert _service(tmp_path / "history.json").initialize().id == newest.id


def test_recent_is_newest_first_and_limited(tmp_path: Path):
    svc = _service(tmp_path / "history.json")
    svc.initialize()
    for _ in range(12):
        svc.create_conversation()

    recent = svc.recent()

    assert len(recent) == 10
    assert recent[0].id == "conv-13"


def test_select_and_delete(tmp_path: Path):
    svc = _service(tmp_path / "history.json")
    first = svc.initialize()
    second = svc.create_conversation()

    svc.select(first.id)
    assert svc.current.id == first.id

    svc.delete(first.id)
    assert svc.current.id == second.id

    with pytest.raises(KeyError):
        svc.select("nope")
    with pytest.raises(KeyError):
        svc.delete("nope")


def test_deleting_the_last_conversation_starts_a_new_one(tmp_path: Path):
    svc = _service(tmp_path / "history.json")
    only = svc.initialize()

    svc.delete(only.id)

    assert svc.current.id != only.id
    assert len(svc.conversations) == 1


def test_corrupt_history_file_starts_empty(tmp_path: Path):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")

    assert ConversationRepository(path).load_all() == []


def test_repository_ignores_entries_without_id(tmp_path: Path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps([{"title": "orphan"}, {"id": "c1", "title": "kept", "messages": []}]), encoding="utf-8")

    assert [c.id for c in ConversationRepository(path).load_all()] == ["c1"]
