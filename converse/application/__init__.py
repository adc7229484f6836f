from .client import ConverseClient

__all__ = ["ConverseClient"]
