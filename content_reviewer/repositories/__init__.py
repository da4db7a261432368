from .conversation_repository import ConversationRepository

__all__ = ["ConversationRepository"]
