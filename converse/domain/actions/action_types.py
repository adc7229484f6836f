from typing import Dict, Any, Optional, Protocol, Awaitable, Union


class SayCallback(Protocol):
    def __call__(self) -> None: ...


class ActionCallback(Protocol):
    def __call__(self, new_context: Optional[Dict[str, Any]] = None) -> None: ...


class SayAction(Protocol):
    """say(session_id, context, message, callback)"""

    def __call__(
        self,
        session_id: str,
        context: Dict[str, Any],
        message: str,
        callback: SayCallback
    ) -> Union[None, Awaitable[None]]: ...


class MergeAction(Protocol):
    """merge(session_id, context, entities, message, callback)"""

    def __call__(
        self,
        session_id: str,
        context: Dict[str, Any],
        entities: Any,
        message: Optional[str],
        callback: ActionCallback
    ) -> Union[None, Awaitable[None]]: ...


class ErrorAction(Protocol):
    """error(session_id, context, error), no callback"""

    def __call__(
        self,
        session_id: str,
        context: Dict[str, Any],
        error: Exception
    ) -> Union[None, Awaitable[None]]: ...


class CustomAction(Protocol):
    """Any other named action: (session_id, context, callback)"""

    def __call__(
        self,
        session_id: str,
        context: Dict[str, Any],
        callback: ActionCallback
    ) -> Union[None, Awaitable[None]]: ...
