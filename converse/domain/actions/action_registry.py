from typing import Dict, List, Any, Callable, Iterator, Mapping
import inspect

from converse.domain.actions.action_validator import ActionValidator, REQUIRED_ACTIONS


class ActionRegistry(Mapping[str, Callable]):
    """Validated, read-only registry of conversation action handlers

    Construction fails synchronously with ``ActionValidationError`` when
    ``say``, ``merge`` or ``error`` is missing, when an entry is not
    callable, or when a handler declares the wrong number of positional
    parameters for its kind.
    """

    def __init__(self, actions: Mapping[str, Callable]):
        self._actions: Dict[str, Callable] = ActionValidator.validate_actions(actions)

    def __getitem__(self, name: str) -> Callable:
        return self._actions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __repr__(self) -> str:
        return f"ActionRegistry({sorted(self._actions)!r})"

    @property
    def custom_actions(self) -> List[str]:
        """Names of the optional, user-defined actions"""

        return [name for name in self._actions if name not in REQUIRED_ACTIONS]

    def describe(self) -> List[Dict[str, Any]]:
        """Describe registered actions for diagnostics"""

        return [
            {
                "name": name,
                "kind": name if name in REQUIRED_ACTIONS else "custom",
                "handler": getattr(handler, "__qualname__", repr(handler)),
                "is_async": _is_coroutine_function(handler)
            }
            for name, handler in self._actions.items()
        ]


def _is_coroutine_function(handler: Callable) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )
