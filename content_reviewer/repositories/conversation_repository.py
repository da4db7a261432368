from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List

from content_reviewer.domain.models import Conversation, ConversationMessage

logger = logging.getLogger(__name__)


def _conversation_from(raw: Dict[str, Any]) -> Conversation:
    return Conversation(
        id=str(raw["id"]),
        title=str(raw.get("title") or "New Conversation"),
        created_at=str(raw.get("created_at") or ""),
        messages=[
            ConversationMessage(
                content=str(m.get("content") or ""),
                role=str(m.get("role") or "user"),
                timestamp=str(m.get("timestamp") or ""),
            )
            for m in raw.get("messages") or []
        ],
    )


@dataclass
class ConversationRepository:
    """
    Repository pattern: keeps conversation history in one JSON file on the
    client machine. Nothing here talks to the relay.
    """
    path: Path

    def load_all(self) -> List[Conversation]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError:
            logger.warning("Conversation history at %s is not valid JSON; starting empty", self.path)
            return []
        if not isinstance(raw, list):
            logger.warning("Conversation history at %s is not a list; starting empty", self.path)
            return []
        return [_conversation_from(item) for item in raw if isinstance(item, dict) and item.get("id")]

    def save_all(self, conversations: List[Conversation]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps([asdict(c) for c in conversations], indent=2), encoding="utf-8")
        tmp.replace(self.path)
