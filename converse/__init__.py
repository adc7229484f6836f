"""
converse - run local actions from a remote NLU service's conversation steps
"""
from converse.application.client import ConverseClient
from converse.domain.actions.action_registry import ActionRegistry
from converse.domain.errors import (
    ConverseError,
    ActionValidationError,
    MissingActionError,
    ActionContractError,
    ActionExecutionError,
    ProtocolError,
    TransportError,
    ContextCloneError,
)
from converse.domain.models.instruction import Instruction, InstructionType
from converse.domain.orchestration.core.step_engine import StepEngine
from converse.infrastructure.config.settings import DEFAULT_MAX_STEPS

__version__ = "0.1.0"

__all__ = [
    "ConverseClient",
    "ActionRegistry",
    "StepEngine",
    "Instruction",
    "InstructionType",
    "ConverseError",
    "ActionValidationError",
    "MissingActionError",
    "ActionContractError",
    "ActionExecutionError",
    "ProtocolError",
    "TransportError",
    "ContextCloneError",
    "DEFAULT_MAX_STEPS",
]
