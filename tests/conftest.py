"""
Shared pytest fixtures and fakes for all tests
"""
import copy
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest

from converse.infrastructure.config.settings import ConverseSettings
from converse.infrastructure.observability.logging import ConversationLogger


class ScriptedTransport:
    """Transport fake that replays canned converse responses"""

    def __init__(self, responses: List[Any], repeat_last: bool = False):
        self.responses = list(responses)
        self.repeat_last = repeat_last
        self.calls: List[Dict[str, Any]] = []
        self.queries: List[Dict[str, Any]] = []

    async def exchange(self, session_id: str, text: Optional[str], context: Dict[str, Any]):
        self.calls.append({
            "session_id": session_id,
            "text": text,
            "context": copy.deepcopy(dict(context)),
        })
        if not self.responses:
            raise AssertionError("No more scripted responses")
        if self.repeat_last and len(self.responses) == 1:
            response = self.responses[0]
        else:
            response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def query(self, text: str, context: Optional[Dict[str, Any]] = None):
        self.queries.append({"text": text, "context": context})
        return {"_text": text, "entities": {}}


class ActionRecorder:
    """Builds handlers that record every invocation in order"""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []

    def say(self, session_id, context, message, callback):
        self.calls.append({"action": "say", "context": context, "message": message})
        callback()

    def merge(self, session_id, context, entities, message, callback):
        self.calls.append({
            "action": "merge",
            "context": context,
            "entities": entities,
            "message": message,
        })
        callback({**context, **entities})

    def error(self, session_id, context, error):
        self.calls.append({"action": "error", "context": context, "error": error})

    def custom(self, name: str, updates: Optional[Dict[str, Any]] = None):
        def handler(session_id, context, callback):
            self.calls.append({"action": name, "context": context})
            callback({**context, **(updates or {})})
        return handler

    def actions(self, **custom) -> Dict[str, Any]:
        actions = {"say": self.say, "merge": self.merge, "error": self.error}
        actions.update(custom)
        return actions

    @property
    def names(self) -> List[str]:
        return [call["action"] for call in self.calls]


@pytest.fixture
def recorder():
    """Fresh action recorder"""
    return ActionRecorder()


@pytest.fixture
def mock_logger():
    """ConversationLogger whose output lands on a Mock"""
    return ConversationLogger(logger=Mock())


@pytest.fixture
def test_settings():
    """Settings isolated from the environment"""
    return ConverseSettings(
        url="https://nlu.test",
        access_token="test-token",
        max_steps=5,
        callback_timeout=10.0,
        request_timeout=5.0,
    )
