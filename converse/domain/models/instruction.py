from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, ValidationError
from enum import Enum


MISSING_TYPE_REASON = "Couldn't find type in Wit response"
UNKNOWN_TYPE_REASON = "Oops, I don't know what to do."
MALFORMED_REASON = "Malformed Wit response"


class InstructionType(str, Enum):
    """Instruction kinds returned by the converse endpoint"""
    STOP = "stop"
    MESSAGE = "msg"
    MERGE = "merge"
    ACTION = "action"
    ERROR = "error"


class Instruction(BaseModel):
    """One decoded step returned by the remote service"""
    type: InstructionType
    msg: Optional[str] = Field(None, description="Text to say for msg instructions")
    action: Optional[str] = Field(None, description="Action name for action instructions")
    entities: Any = Field(default_factory=dict, description="Entities extracted for merge")
    confidence: Optional[float] = None
    reason: Optional[str] = Field(None, description="Why this instruction decoded as an error")
    raw: Dict[str, Any] = Field(default_factory=dict, description="Undecoded response body")

    @classmethod
    def from_response(cls, data: Any) -> "Instruction":
        """Decode a response body, mapping unknown shapes to the error variant"""

        if not isinstance(data, dict):
            return cls(type=InstructionType.ERROR, reason=MISSING_TYPE_REASON)

        raw_type = data.get("type")
        if not raw_type:
            return cls(type=InstructionType.ERROR, reason=MISSING_TYPE_REASON, raw=data)

        try:
            instruction_type = InstructionType(raw_type)
        except ValueError:
            return cls(type=InstructionType.ERROR, reason=UNKNOWN_TYPE_REASON, raw=data)

        if instruction_type == InstructionType.ACTION and not data.get("action"):
            return cls(type=InstructionType.ERROR, reason=UNKNOWN_TYPE_REASON, raw=data)

        try:
            return cls(
                type=instruction_type,
                msg=data.get("msg"),
                action=data.get("action"),
                entities=data.get("entities") or {},
                confidence=data.get("confidence"),
                reason=UNKNOWN_TYPE_REASON if instruction_type == InstructionType.ERROR else None,
                raw=data
            )
        except ValidationError as e:
            # Wrong-typed fields, e.g. a numeric msg
            fields = ", ".join(str(error["loc"][0]) for error in e.errors() if error["loc"])
            return cls(
                type=InstructionType.ERROR,
                reason=f"{MALFORMED_REASON}: {fields}" if fields else MALFORMED_REASON,
                raw=data
            )

    @property
    def is_terminal(self) -> bool:
        return self.type in (InstructionType.STOP, InstructionType.ERROR)


class StepState(str, Enum):
    """States of the step engine"""
    AWAITING_INSTRUCTION = "awaiting_instruction"
    DISPATCHING = "dispatching"
    AWAITING_HANDLER = "awaiting_handler"
    TERMINAL = "terminal"
