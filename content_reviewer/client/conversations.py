from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable, List, Optional

from content_reviewer.domain.models import Conversation, ConversationMessage
from content_reviewer.repositories.conversation_repository import ConversationRepository
from content_reviewer.utils.text import truncate

NEW_CONVERSATION_TITLE = "New Conversation"
TITLE_LENGTH = 50


class ConversationService:
    """Client-local conversation history. Constructed explicitly, call initialize() once."""

    def __init__(
        self,
        repo: ConversationRepository,
        clock: Callable[[], datetime] = datetime.now,
        new_id: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self.repo = repo
        self.clock = clock
        self.new_id = new_id
        self.conversations: List[Conversation] = []
        self.current_id: Optional[str] = None

    def _save(self) -> None:
        self.repo.save_all(self.conversations)

    def initialize(self) -> Conversation:
        self.conversations = self.repo.load_all()
        if not self.conversations:
            return self.create_conversation()
        self.current_id = max(self.conversations, key=lambda c: c.created_at).id
        return self.current

    @property
    def current(self) -> Conversation:
        for c in self.conversations:
            if c.id == self.current_id:
                return c
        raise LookupError("No current conversation; call initialize() first")

    def create_conversation(self) -> Conversation:
        conv = Conversation(id=self.new_id(), title=NEW_CONVERSATION_TITLE, created_at=self.clock().isoformat())
        self.conversations.insert(0, conv)
        self.current_id = conv.id
        self._save()
        return conv

    def select(self, conversation_id: str) -> Conversation:
        if not any(c.id == conversation_id for c in self.conversations):
            raise KeyError(conversation_id)
        self.current_id = conversation_id
        return self.current

    def add_message(self, content: str, role: str = "user") -> ConversationMessage:
        conv = self.current
        msg = ConversationMessage(content=content, role=role, timestamp=self.clock().isoformat())
        # first user message names the conversation
        if role == "user" and not any(m.role == "user" for m in conv.messages):
            conv.title = truncate(content.strip(), TITLE_LENGTH)
        conv.messages.append(msg)
        self._save()
        return msg

    def recent(self, limit: int = 10) -> List[Conversation]:
        return sorted(self.conversations, key=lambda c: c.created_at, reverse=True)[:limit]

    def delete(self, conversation_id: str) -> None:
        before = len(self.conversations)
        self.conversations = [c for c in self.conversations if c.id != conversation_id]
        if len(self.conversations) == before:
            raise KeyError(conversation_id)
        if self.current_id == conversation_id:
            self.current_id = None
            if self.conversations:
                self.current_id = self.recent(1)[0].id
            else:
                self.create_conversation()
                return
        self._save()
