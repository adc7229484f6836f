"""
HTTP transport for the remote NLU service.

Two endpoints are used:

    GET  /message?q=<text>[&context=<json>]      one-shot understanding
    POST /converse?session_id=<id>[&q=<text>]    next instruction, body = context

Every failure (network, timeout, non-200 status, malformed body, or a body
carrying an ``error`` key) is raised as ``TransportError``. There are no
retries; the caller decides what to do.
"""
from typing import Dict, Any, Optional, Mapping
import json

import httpx

from converse.domain.errors import TransportError
from converse.domain.models.instruction import Instruction
from converse.infrastructure.config.settings import ConverseSettings, get_settings
from converse.infrastructure.observability.logging import ConversationLogger, conversation_logger

__version__ = "0.1.0"


class NLUClient:
    """Async client for the message and converse endpoints"""

    def __init__(
        self,
        access_token: str,
        settings: Optional[ConverseSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[ConversationLogger] = None
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.url.rstrip("/")
        self.logger = logger or conversation_logger
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "User-Agent": f"converse/{__version__}",
        }
        # Injected clients are closed by whoever created them
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            verify=self.settings.verify_ssl
        )

    async def query(self, text: str, context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """One-shot natural-language query"""

        params = {"q": text}
        if context:
            params["context"] = json.dumps(context)
        return await self._request("message", "GET", params=params)

    async def exchange(
        self,
        session_id: str,
        text: Optional[str],
        context: Optional[Mapping[str, Any]]
    ) -> Instruction:
        """Ask for the next instruction of a conversation"""

        # Only the first exchange of a turn carries the user text
        params = {"session_id": session_id}
        if text:
            params["q"] = text
        data = await self._request("converse", "POST", params=params, body=dict(context or {}))
        return Instruction.from_response(data)

    async def _request(
        self,
        endpoint: str,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"

        # Send request

        try:
            response = await self.http_client.request(
                method,
                url,
                params=params,
                json=body,
                headers=self.headers
            )
        except httpx.TimeoutException as e:
            raise self._fail(endpoint, f"Timeout calling {url}: {e}") from e
        except httpx.HTTPError as e:
            raise self._fail(endpoint, f"Could not reach {url}: {e}") from e

        # Decode body, it may not be JSON on failures
        try:
            data = response.json()
        except ValueError:
            data = None

        # Check status
        if response.status_code != 200:
            body_text = json.dumps(data) if data is not None else response.text
            raise self._fail(
                endpoint,
                f"{body_text} ({response.status_code})",
                status_code=response.status_code,
                response_data=data if isinstance(data, dict) else None
            )

        if not isinstance(data, dict):
            raise self._fail(
                endpoint,
                "Malformed response body",
                status_code=response.status_code
            )

        # Service-level error reported with a 200
        if data.get("error"):
            raise self._fail(
                endpoint,
                str(data["error"]),
                status_code=response.status_code,
                response_data=data
            )

        self.logger.debug("Response received", endpoint=endpoint, response=data)
        return data

    def _fail(
        self,
        endpoint: str,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None
    ) -> TransportError:
        self.logger.error("Request failed", endpoint=endpoint, error=message)
        return TransportError(
            message,
            endpoint=endpoint,
            status_code=status_code,
            response_data=response_data
        )

    async def aclose(self):
        """Close the underlying HTTP client if we created it"""

        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "NLUClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
