from typing import Dict, Any, Callable, Mapping
import inspect

from converse.domain.errors import ActionValidationError


LEARN_MORE = "Learn more at https://wit.ai/docs/quickstart"

REQUIRED_ACTIONS = ("say", "merge", "error")

# name -> (positional parameter count, parameter description)
ACTION_CONTRACTS = {
    "say": (4, "sessionId, context, message, callback"),
    "merge": (5, "sessionId, context, entities, message, callback"),
    "error": (3, "sessionId, context, error"),
}
CUSTOM_ACTION_CONTRACT = (3, "sessionId, context, callback")

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def count_positional_parameters(handler: Callable) -> int:
    """Number of positional parameters a handler declares"""

    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures
        return -1

    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind in _POSITIONAL_KINDS:
            count += 1
        elif (parameter.kind == inspect.Parameter.KEYWORD_ONLY
              and parameter.default is inspect.Parameter.empty):
            return -1
    return count


class ActionValidator:
    """Checks a handler mapping against the per-kind calling conventions"""

    @staticmethod
    def validate_actions(actions: Any) -> Dict[str, Callable]:
        if not isinstance(actions, Mapping):
            raise ActionValidationError("The actions parameter should be a mapping.")

        # Required actions
        for name in REQUIRED_ACTIONS:
            if name not in actions or actions[name] is None:
                raise ActionValidationError(f"The '{name}' action is missing. {LEARN_MORE}")

        for name, handler in actions.items():
            if not isinstance(name, str):
                raise ActionValidationError(f"Action names should be strings, got {name!r}.")
            if not callable(handler):
                raise ActionValidationError(f"The '{name}' action should be a function.")

            # Arity: say, merge and error have fixed shapes, everything else is custom
            expected, described = ACTION_CONTRACTS.get(name, CUSTOM_ACTION_CONTRACT)
            if count_positional_parameters(handler) != expected:
                raise ActionValidationError(
                    f"The '{name}' action should accept {expected} arguments: {described}. {LEARN_MORE}"
                )

        return dict(actions)
