from typing import Dict, Any, Optional, Mapping
import asyncio

from converse.domain.context.snapshot import clone_context


class ContextStore:
    """Keeps the latest context snapshot per conversation session"""

    def __init__(self):
        self.contexts: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> Dict[str, Any]:
        """Get a copy of the session context, empty if unknown"""

        async with self._lock:
            return clone_context(self.contexts.get(session_id))

    async def put(self, session_id: str, context: Optional[Mapping[str, Any]]):
        """Replace the session context with a snapshot of the given one"""

        snapshot = clone_context(context)
        async with self._lock:
            self.contexts[session_id] = snapshot
