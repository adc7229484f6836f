"""
Minimal handlers for trying a service from the console.

``say`` prints the message, ``merge`` stores the extracted entities under
``context["entities"]`` and ``error`` prints the error.
"""
from typing import Dict, Any, Optional, Callable


def say(session_id: str, context: Dict[str, Any], message: str, callback: Callable[[], None]):
    print(message)
    callback()


def merge(
    session_id: str,
    context: Dict[str, Any],
    entities: Any,
    message: Optional[str],
    callback: Callable[[Optional[Dict[str, Any]]], None]
):
    if entities:
        context["entities"] = entities
    callback(context)


def error(session_id: str, context: Dict[str, Any], error: Exception):
    print(f"Error: {error}")


CONSOLE_ACTIONS = {
    "say": say,
    "merge": merge,
    "error": error,
}
