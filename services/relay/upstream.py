"""Streaming chat-completions calls to the OpenAI-compatible model server."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, Dict, List

import openai
from openai import AsyncOpenAI

from services.relay.errors import UpstreamUnavailableError

TEMPERATURE = 0.7


class UpstreamChatClient:
    """Open raw server-sent-event streams from the model server.

    The response body is handed back undecoded so the relay can parse the
    event frames itself.
    """

    def __init__(self, client: AsyncOpenAI, model: str, temperature: float = TEMPERATURE) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model
        self.temperature = temperature

    @asynccontextmanager
    async def open_stream(self, messages: List[Dict[str, Any]]) -> AsyncIterator[AsyncIterator[bytes]]:
        """Dispatch the conversation and yield an iterator over the raw body bytes.

        Raises:
            UpstreamUnavailableError: If the server is unreachable or answers
                with a non-success status. No retry is attempted.
        """
        async with AsyncExitStack() as stack:
            try:
                response = await stack.enter_async_context(
                    self.client.chat.completions.with_streaming_response.create(
                        model=self.model,
                        messages=messages,
                        stream=True,
                        temperature=self.temperature,
                    )
                )
            except openai.APIStatusError as exc:
                logging.error("Model server returned HTTP %s for %s", exc.status_code, self.model)
                raise UpstreamUnavailableError(
                    f"Model server returned HTTP {exc.status_code}", status_code=exc.status_code
                ) from exc
            except openai.APIConnectionError as exc:
                logging.error("Model server unreachable at %s: %s", self.client.base_url, exc)
                raise UpstreamUnavailableError("Model server unreachable") from exc

            yield response.iter_bytes()
