from typing import Dict, Any, Optional, Mapping, Callable, Protocol, Union
import asyncio
import inspect
import time

import structlog

from converse.domain.context.snapshot import clone_context
from converse.domain.errors import (
    ConverseError, ActionContractError, ActionExecutionError,
    ContextCloneError, MissingActionError, ProtocolError, TransportError
)
from converse.domain.models.instruction import Instruction, InstructionType, StepState
from converse.domain.orchestration.watchdog import CallbackWatchdog
from converse.infrastructure.config.settings import DEFAULT_MAX_STEPS, CALLBACK_TIMEOUT_SECONDS
from converse.infrastructure.observability.logging import ConversationLogger


class Transport(Protocol):
    """What the engine needs from the remote service"""

    async def query(self, text: str, context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]: ...

    async def exchange(
        self,
        session_id: str,
        text: Optional[str],
        context: Optional[Mapping[str, Any]]
    ) -> Union[Instruction, Mapping[str, Any]]: ...


class _Completion:
    """One-shot completion callback loaned to a handler for one step"""

    def __init__(self, action: str, watchdog: CallbackWatchdog):
        self.action = action
        self.watchdog = watchdog
        self.future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._settled = False

    def _settle(self):
        if self._settled:
            raise ActionContractError(
                f"The '{self.action}' callback was called more than once or after the step ended."
            )
        self._settled = True
        self.watchdog.clear()

    def abandon(self):
        """Stop waiting: the handler failed before calling back"""

        if not self._settled:
            self._settled = True
            self.watchdog.clear()

    def failure(self) -> Optional[BaseException]:
        if self.future.done() and not self.future.cancelled():
            return self.future.exception()
        return None

    def _fail(self, error: ConverseError):
        if not self.future.done():
            self.future.set_exception(error)
        raise error

    def _resolve(self, value: Any):
        if not self.future.done():
            self.future.set_result(value)


class SayCompletion(_Completion):
    """Completion for ``say``: must be called with no arguments"""

    def __call__(self, *args, **kwargs) -> None:
        self._settle()
        if args or kwargs:
            self._fail(ActionContractError("The 'say' callback should not have any arguments!"))
        self._resolve(None)


class ActionCompletion(_Completion):
    """Completion for ``merge`` and named actions: optional next context"""

    def __call__(self, *args, **kwargs) -> None:
        self._settle()
        if len(args) + len(kwargs) > 1 or (kwargs and "new_context" not in kwargs):
            self._fail(ActionContractError(
                f"The '{self.action}' callback accepts a single optional context argument."
            ))
        new_context = args[0] if args else kwargs.get("new_context")
        if new_context is not None and not isinstance(new_context, Mapping):
            self._fail(ActionContractError(
                f"The '{self.action}' callback should be called with a mapping, "
                f"got {type(new_context).__name__}."
            ))

        # Snapshot now, the handler keeps its reference after calling back
        try:
            snapshot = clone_context(new_context)
        except ContextCloneError as e:
            self._fail(e)
        self._resolve(snapshot)


class StepEngine:
    """Drives one conversation turn against the remote service

    Each step asks the transport for the next instruction, hands a cloned
    context to the matching handler, waits for the handler's callback and
    loops, until the service says ``stop``, an error instruction is handled,
    or the step budget runs out. Budget exhaustion is a soft halt: the
    current context is returned as a success.
    """

    def __init__(
        self,
        transport: Transport,
        actions: Mapping[str, Callable],
        logger: Optional[ConversationLogger] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        callback_timeout: float = CALLBACK_TIMEOUT_SECONDS
    ):
        self.transport = transport
        self.actions = actions
        self.logger = logger or ConversationLogger.silent()
        self.max_steps = max_steps
        self.callback_timeout = callback_timeout

    async def run(
        self,
        session_id: str,
        message: Optional[str],
        context: Optional[Mapping[str, Any]] = None,
        max_steps: Optional[int] = None
    ) -> Dict[str, Any]:
        """Run steps until stop, a handled error, or budget exhaustion

        Returns the final context, or raises exactly one ``ConverseError``.
        """

        steps_left = self.max_steps if max_steps is None else max_steps
        context = clone_context(context)
        text = message

        with structlog.contextvars.bound_contextvars(session_id=session_id):
            while True:
                # Budget is checked before every exchange, including the first
                if steps_left <= 0:
                    self.logger.warn("Max steps reached, halting.", session_id=session_id)
                    self._transition(session_id, StepState.AWAITING_INSTRUCTION, StepState.TERMINAL, steps_left)
                    return context

                # Get next instruction, only the first exchange carries the message
                instruction = await self._next_instruction(session_id, text, context)
                text = None
                self.logger.debug("Context", session_id=session_id, context=context)
                self._transition(
                    session_id, StepState.AWAITING_INSTRUCTION, StepState.DISPATCHING,
                    steps_left, instruction.type.value
                )

                # Terminal instructions
                if instruction.type == InstructionType.STOP:
                    self._transition(session_id, StepState.DISPATCHING, StepState.TERMINAL, steps_left, "stop")
                    return context

                if instruction.type == InstructionType.ERROR:
                    await self._dispatch_error(session_id, context, instruction)
                    self._transition(session_id, StepState.DISPATCHING, StepState.TERMINAL, steps_left, "error")
                    return context

                self._transition(
                    session_id, StepState.DISPATCHING, StepState.AWAITING_HANDLER,
                    steps_left, instruction.type.value
                )
                # Dispatch to the matching handler
                if instruction.type == InstructionType.MESSAGE:
                    await self._dispatch_say(session_id, context, instruction)
                elif instruction.type == InstructionType.MERGE:
                    context = await self._dispatch_merge(session_id, context, instruction, message)
                else:
                    context = await self._dispatch_action(session_id, context, instruction)

                steps_left -= 1
                self.logger.debug("Context updated", session_id=session_id, context=context)
                self._transition(
                    session_id, StepState.AWAITING_HANDLER, StepState.AWAITING_INSTRUCTION, steps_left
                )

    async def _next_instruction(
        self,
        session_id: str,
        text: Optional[str],
        context: Dict[str, Any]
    ) -> Instruction:
        # Anything the transport raises outside our hierarchy is a transport failure
        try:
            response = await self.transport.exchange(session_id, text, context)
        except ConverseError:
            raise
        except Exception as e:
            self.logger.error("Transport failed", session_id=session_id, error=str(e))
            raise TransportError(str(e), endpoint="converse") from e

        if isinstance(response, Instruction):
            return response
        return Instruction.from_response(response)

    def _require(self, name: str) -> Callable:
        handler = self.actions.get(name)
        if handler is None:
            self.logger.error("Action not found", action=name)
            raise MissingActionError(name)
        return handler

    async def _dispatch_say(self, session_id: str, context: Dict[str, Any], instruction: Instruction):
        handler = self._require("say")
        self.logger.log(f"Executing say with message: {instruction.msg}", session_id=session_id)
        completion = SayCompletion("say", self._watchdog("say"))
        await self._invoke(
            "say", handler, completion, session_id,
            (session_id, clone_context(context), instruction.msg, completion)
        )

    async def _dispatch_merge(
        self,
        session_id: str,
        context: Dict[str, Any],
        instruction: Instruction,
        message: Optional[str]
    ) -> Dict[str, Any]:
        handler = self._require("merge")
        self.logger.log("Executing merge action", session_id=session_id)
        completion = ActionCompletion("merge", self._watchdog("merge"))
        return await self._invoke(
            "merge", handler, completion, session_id,
            (session_id, clone_context(context), instruction.entities, message, completion)
        )

    async def _dispatch_action(
        self,
        session_id: str,
        context: Dict[str, Any],
        instruction: Instruction
    ) -> Dict[str, Any]:
        action = instruction.action
        handler = self._require(action)
        self.logger.log(f"Executing action: {action}", session_id=session_id)
        completion = ActionCompletion(action, self._watchdog(action))
        return await self._invoke(
            action, handler, completion, session_id,
            (session_id, clone_context(context), completion)
        )

    async def _dispatch_error(self, session_id: str, context: Dict[str, Any], instruction: Instruction):
        handler = self._require("error")
        self.logger.log("Executing error action", session_id=session_id)
        error = ProtocolError(instruction.reason or "Oops, I don't know what to do.", instruction.raw)

        started = time.monotonic()
        try:
            result = handler(session_id, clone_context(context), error)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.logger.log_action_execution("error", session_id, success=False, error=str(e))
            raise ActionExecutionError("error", e) from e
        self.logger.log_action_execution("error", session_id, _elapsed_ms(started))

    async def _invoke(
        self,
        action: str,
        handler: Callable,
        completion: _Completion,
        session_id: str,
        args: tuple
    ) -> Any:
        started = time.monotonic()
        completion.watchdog.start()

        try:
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                completion.abandon()
                # A misused callback already failed the step; surface that below.
                # A second call after success leaves the step untouched.
                already_failed = completion.failure() is not None
                repeated_call = isinstance(e, ActionContractError) and completion.future.done()
                if not (already_failed or repeated_call):
                    self.logger.log_action_execution(action, session_id, success=False, error=str(e))
                    if isinstance(e, ActionContractError):
                        raise
                    raise ActionExecutionError(action, e) from e

            # Wait for the callback, the handler may call it after returning
            try:
                value = await completion.future
            except ConverseError as e:
                self.logger.log_action_execution(action, session_id, success=False, error=str(e))
                raise
        finally:
            # Cancelled turns must not leave the timer armed
            completion.abandon()

        self.logger.log_action_execution(action, session_id, _elapsed_ms(started))
        return value

    def _watchdog(self, action: str) -> CallbackWatchdog:
        return CallbackWatchdog(self.callback_timeout, self.logger, action)

    def _transition(
        self,
        session_id: str,
        from_state: StepState,
        to_state: StepState,
        steps_left: int,
        instruction: Optional[str] = None
    ):
        self.logger.log_step_transition(
            session_id, from_state.value, to_state.value, steps_left, instruction
        )


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 3)
