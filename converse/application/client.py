from typing import Dict, Any, Optional, Mapping, Callable

from converse.application.shell.interactive_shell import InteractiveShell
from converse.domain.actions.action_registry import ActionRegistry
from converse.domain.models.instruction import Instruction
from converse.domain.orchestration.core.step_engine import StepEngine, Transport
from converse.infrastructure.config.settings import ConverseSettings, get_settings
from converse.infrastructure.observability.logging import ConversationLogger, conversation_logger
from converse.infrastructure.transport.nlu_client import NLUClient


class ConverseClient:
    """Client for a remote NLU service that runs local actions

    Example::

        async def say(session_id, context, message, callback):
            print(message)
            callback()

        async def merge(session_id, context, entities, message, callback):
            callback({**context, "location": entities.get("location")})

        def error(session_id, context, error):
            print(error)

        async with ConverseClient(token, {"say": say, "merge": merge, "error": error}) as client:
            context = await client.run_actions("session-1", "Weather in Paris?", {})
    """

    def __init__(
        self,
        access_token: Optional[str],
        actions: Mapping[str, Callable],
        logger: Optional[ConversationLogger] = None,
        settings: Optional[ConverseSettings] = None,
        transport: Optional[Transport] = None
    ):
        self.settings = settings or get_settings()
        self.logger = logger or conversation_logger
        self.actions = ActionRegistry(actions)
        self.transport = transport or NLUClient(
            access_token or self.settings.access_token or "",
            settings=self.settings,
            logger=self.logger
        )
        self.engine = StepEngine(
            self.transport,
            self.actions,
            logger=self.logger,
            max_steps=self.settings.max_steps,
            callback_timeout=self.settings.callback_timeout
        )

        self.logger.debug(
            "Actions registered",
            actions=self.actions.describe(),
            custom_actions=self.actions.custom_actions
        )

    async def message(self, text: str, context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """One-shot natural-language query"""

        return await self.transport.query(text, context)

    async def converse(
        self,
        session_id: str,
        text: Optional[str],
        context: Optional[Mapping[str, Any]] = None
    ) -> Instruction:
        """Fetch a single instruction without running any action"""

        response = await self.transport.exchange(session_id, text, context or {})
        if isinstance(response, Instruction):
            return response
        return Instruction.from_response(response)

    async def run_actions(
        self,
        session_id: str,
        message: Optional[str],
        context: Optional[Mapping[str, Any]] = None,
        max_steps: Optional[int] = None
    ) -> Dict[str, Any]:
        """Run a conversation turn and return the final context"""

        return await self.engine.run(session_id, message, context, max_steps)

    async def interactive(
        self,
        context: Optional[Mapping[str, Any]] = None,
        max_steps: Optional[int] = None
    ):
        """Drive conversations from console input until EOF"""

        shell = InteractiveShell(self, context=context, max_steps=max_steps, logger=self.logger)
        await shell.run()

    async def aclose(self):
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "ConverseClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
