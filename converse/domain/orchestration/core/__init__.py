from .step_engine import StepEngine, Transport, SayCompletion, ActionCompletion

__all__ = ["StepEngine", "Transport", "SayCompletion", "ActionCompletion"]
