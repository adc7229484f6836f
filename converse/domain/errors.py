from typing import Dict, Any, Optional


class ConverseError(Exception):
    """Base error for conversation orchestration"""


class ActionValidationError(ConverseError, ValueError):
    """Raised when an action registry is rejected at construction time"""


class MissingActionError(ConverseError):
    """An instruction named an action that is not registered"""

    def __init__(self, action: str):
        super().__init__(f"No '{action}' action found.")
        self.action = action


class ActionContractError(ConverseError):
    """A handler broke its calling convention (bad callback usage)"""


class ActionExecutionError(ConverseError):
    """A handler raised while executing"""

    def __init__(self, action: str, error: BaseException):
        super().__init__(f"The '{action}' action failed: {error}")
        self.action = action
        self.error = error


class ProtocolError(ConverseError):
    """The remote service returned an instruction we cannot act on"""

    def __init__(self, message: str, response_data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.response_data = response_data or {}


class TransportError(ConverseError):
    """Network failure, non-success status or malformed body"""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.response_data = response_data or {}


class ContextCloneError(ConverseError, TypeError):
    """A context value is not a JSON-compatible kind"""
