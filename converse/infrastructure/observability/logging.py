import structlog
import logging
import sys
from typing import Dict, Any, Optional
from datetime import datetime
import os


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    service_name: str = "converse"
) -> None:
    """Setup structured logging configuration"""

    # Configure Python logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )

    # Processors for structlog
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
    ]

    # Add appropriate renderer based on format
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    # Configure structlog
    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Set service name in context
    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=os.getenv("ENVIRONMENT", "development"),
    )


def add_service_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add service context to all log entries"""

    # Add timestamp if not present
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.utcnow().isoformat()

    # Add session ID if available and not already bound on the event
    session_id = structlog.contextvars.get_contextvars().get("session_id")
    if session_id and "session_id" not in event_dict:
        event_dict["session_id"] = session_id

    return event_dict


def _drop_event(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    raise structlog.DropEvent


class ConversationLogger:
    """Leveled logger for conversation orchestration

    Exposes the four levels the step engine needs (``debug``, ``log``,
    ``warn``, ``error``) plus structured helpers for step transitions and
    action execution.
    """

    def __init__(self, name: str = "converse", logger: Optional[Any] = None):
        self.logger = logger if logger is not None else structlog.get_logger(name)

    @classmethod
    def silent(cls) -> "ConversationLogger":
        """A logger that discards everything"""

        return cls(logger=structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[_drop_event],
            wrapper_class=structlog.BoundLogger,
        ))

    def debug(self, event: str, **kwargs):
        self.logger.debug(event, **kwargs)

    def log(self, event: str, **kwargs):
        self.logger.info(event, **kwargs)

    def warn(self, event: str, **kwargs):
        self.logger.warning(event, **kwargs)

    def error(self, event: str, **kwargs):
        self.logger.error(event, **kwargs)

    def log_step_transition(
        self,
        session_id: str,
        from_state: str,
        to_state: str,
        steps_left: Optional[int] = None,
        instruction: Optional[str] = None
    ):
        """Log step engine state transitions"""

        self.logger.debug(
            "step_transition",
            session_id=session_id,
            from_state=from_state,
            to_state=to_state,
            steps_left=steps_left,
            instruction=instruction
        )

    def log_action_execution(
        self,
        action_name: str,
        session_id: str,
        duration_ms: Optional[float] = None,
        success: bool = True,
        error: Optional[str] = None
    ):
        """Log the outcome of one action handler"""

        self.logger.debug(
            "action_execution",
            action_name=action_name,
            session_id=session_id,
            duration_ms=duration_ms,
            success=success,
            error=error
        )


# Global logger instance
conversation_logger = ConversationLogger("converse")
