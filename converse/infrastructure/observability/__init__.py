from .logging import ConversationLogger, conversation_logger, setup_logging

__all__ = ["ConversationLogger", "conversation_logger", "setup_logging"]
