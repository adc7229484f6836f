from .interactive_shell import InteractiveShell, ConversationRunner
from .console_actions import CONSOLE_ACTIONS

__all__ = ["InteractiveShell", "ConversationRunner", "CONSOLE_ACTIONS"]
