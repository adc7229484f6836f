from typing import Dict, Any, Optional, Mapping, Callable, Protocol
import asyncio
import uuid

from converse.domain.context.context_store import ContextStore
from converse.domain.errors import ConverseError
from converse.infrastructure.observability.logging import ConversationLogger, conversation_logger


class ConversationRunner(Protocol):
    async def run_actions(
        self,
        session_id: str,
        message: Optional[str],
        context: Optional[Mapping[str, Any]] = None,
        max_steps: Optional[int] = None
    ) -> Dict[str, Any]: ...


class InteractiveShell:
    """Feeds console lines to a conversation, one turn per line

    The session id stays fixed for the life of the shell and the context
    returned by each turn is stored and handed to the next one. A failed
    turn is logged and leaves the stored context as it was.
    """

    def __init__(
        self,
        runner: ConversationRunner,
        context: Optional[Mapping[str, Any]] = None,
        max_steps: Optional[int] = None,
        session_id: Optional[str] = None,
        context_store: Optional[ContextStore] = None,
        logger: Optional[ConversationLogger] = None,
        prompt: str = "> ",
        read_line: Callable[[str], str] = input
    ):
        self.runner = runner
        self.initial_context = context if isinstance(context, Mapping) else {}
        self.max_steps = max_steps
        self.session_id = session_id or str(uuid.uuid4())
        self.context_store = context_store or ContextStore()
        self.logger = logger or conversation_logger
        self.prompt = prompt
        self.read_line = read_line

    async def run(self):
        """Read lines until EOF or interrupt"""

        # Seed the session with the initial context
        await self.context_store.put(self.session_id, self.initial_context)
        loop = asyncio.get_running_loop()

        while True:
            try:
                line = await loop.run_in_executor(None, self.read_line, self.prompt)
            except (EOFError, KeyboardInterrupt):
                break
            await self.handle_line(line)

        self.logger.debug("Interactive session ended", session_id=self.session_id)

    async def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        """Run one turn; returns the new context or None on failure"""

        context = await self.context_store.get(self.session_id)
        try:
            context = await self.runner.run_actions(
                self.session_id,
                line.strip(),
                context,
                self.max_steps
            )
        except ConverseError as e:
            # Keep the previous context for the next line
            self.logger.error(str(e), session_id=self.session_id)
            return None

        await self.context_store.put(self.session_id, context)
        return context

    async def current_context(self) -> Dict[str, Any]:
        return await self.context_store.get(self.session_id)
