from .nlu_client import NLUClient

__all__ = ["NLUClient"]
