"""OpenRouter chat completion client."""

import json
import logging
from typing import List, Optional

import aiohttp

from ..core.exceptions import MalformedResponseException, UpstreamException
from ..models.chat import ChatMessage, CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


def build_request(
    model: str,
    messages: List[ChatMessage],
    system_instructions: Optional[str] = None,
) -> CompletionRequest:
    """
    Build a completion request from collected context.

    Args:
        model: OpenRouter model identifier
        messages: Conversation context, oldest first
        system_instructions: Optional system prompt placed before the context

    Returns:
        CompletionRequest with the system message (if any) at index 0
    """
    all_messages: List[ChatMessage] = []
    if system_instructions:
        all_messages.append(ChatMessage(content=system_instructions, role="system"))
    all_messages.extend(messages)

    return CompletionRequest(model=model, messages=all_messages)


class OpenRouterClient:
    """Sends a single completion request per call; no retries."""

    def __init__(
        self,
        api_url: str = OPENROUTER_URL,
        referer: str = "https://discord.com/",
        title: str = "Discord AI Responder",
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the client.

        Args:
            api_url: Chat completions endpoint
            referer: Value of the HTTP-Referer attribution header
            title: Value of the X-Title attribution header
            session: Shared session; a short-lived one is opened per call when omitted
        """
        self.api_url = api_url
        self.referer = referer
        self.title = title
        self._session = session

    def _headers(self, api_key: str) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

    async def complete(self, api_key: str, request: CompletionRequest) -> CompletionResponse:
        """
        POST the request and parse the response.

        Args:
            api_key: OpenRouter API key
            request: Completion request to send

        Returns:
            Parsed CompletionResponse

        Raises:
            UpstreamException: If the HTTP status is not 2xx
            MalformedResponseException: If the body is not a valid completion
        """
        headers = self._headers(api_key)
        payload = request.to_payload()

        if self._session is not None:
            return await self._post(self._session, headers, payload)

        async with aiohttp.ClientSession() as session:
            return await self._post(session, headers, payload)

    async def _post(self, session: aiohttp.ClientSession, headers: dict, payload: dict) -> CompletionResponse:
        async with session.post(self.api_url, headers=headers, json=payload) as response:
            body = await response.text()
            status = response.status

        if not 200 <= status < 300:
            raise UpstreamException(status, body)

        try:
            data = json.loads(body)
        except ValueError as e:
            raise MalformedResponseException("Completion response is not valid JSON", e)

        completion = CompletionResponse.from_dict(data)
        logger.debug(f"Completion {completion.id} from {completion.model}: {len(completion.choices)} choices")
        return completion
