from .instruction import Instruction, InstructionType, StepState

__all__ = ["Instruction", "InstructionType", "StepState"]
