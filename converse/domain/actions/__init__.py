from .action_registry import ActionRegistry
from .action_validator import ActionValidator, REQUIRED_ACTIONS
from .action_types import (
    SayAction, MergeAction, ErrorAction, CustomAction,
    SayCallback, ActionCallback
)

__all__ = [
    "ActionRegistry",
    "ActionValidator",
    "REQUIRED_ACTIONS",
    "SayAction",
    "MergeAction",
    "ErrorAction",
    "CustomAction",
    "SayCallback",
    "ActionCallback",
]
