"""Re-frame the model server's event stream for the browser.

The relay reads the upstream body chunk by chunk, forwards each parsed
token as a simplified event, and accumulates the full assistant reply.
It ends in exactly one terminal state:

* ``DONE``: the ``[DONE]`` sentinel arrived or the upstream body ended.
  A ``{"done": true}`` frame is emitted and the accumulated reply is
  handed to ``on_complete``.
* ``ERRORED``: the upstream could not be opened or failed mid-stream. A
  single ``{"error": ...}`` frame is emitted and nothing is committed.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, List

import httpx
import openai

from services.relay.sse_parser import SseFrameParser

DONE_SENTINEL = "[DONE]"
UPSTREAM_ERROR_MESSAGE = "Upstream error"


class RelayState(str, enum.Enum):
	STREAMING = "streaming"
	DONE = "done"
	ERRORED = "errored"


@dataclass(frozen=True)
class RelayFrame:
	"""One downstream event: ``delta``, ``raw``, ``done`` or ``error``."""

	kind: str
	value: Any

	@classmethod
	def delta(cls, token: str) -> "RelayFrame":
		return cls("delta", token)

	@classmethod
	def raw(cls, payload: str) -> "RelayFrame":
		return cls("raw", payload)

	@classmethod
	def done(cls) -> "RelayFrame":
		return cls("done", True)

	@classmethod
	def error(cls, message: str) -> "RelayFrame":
		return cls("error", message)

	def to_dict(self) -> Dict[str, Any]:
		return {self.kind: self.value}

	def encode(self) -> bytes:
		"""Serialize as a server-sent event."""
		body = json.dumps(self.to_dict(), ensure_ascii=False)
		return f"data: {body}\n\n".encode("utf-8")


def extract_token(event: Any) -> str:
	"""Return the text token of a chat-completion chunk.

	Prefers ``choices[0].delta.content`` and falls back to
	``choices[0].message.content``; anything missing yields "".
	"""
	if not isinstance(event, dict):
		return ""
	choices = event.get("choices")
	if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
		return ""
	choice = choices[0]
	for key in ("delta", "message"):
		part = choice.get(key)
		content = part.get("content") if isinstance(part, dict) else None
		if content is not None:
			return content if isinstance(content, str) else ""
	return ""


class StreamRelay:
	"""State machine turning upstream SSE bytes into relay frames."""

	def __init__(self, on_complete: Callable[[str], None]) -> None:
		self._on_complete = on_complete
		self._parser = SseFrameParser()
		self.state = RelayState.STREAMING
		self.text = ""

	def feed(self, chunk: bytes) -> List[RelayFrame]:
		"""Process one upstream chunk and return the frames to send downstream."""
		frames: List[RelayFrame] = []
		if self.state is not RelayState.STREAMING:
			return frames
		for payload in self._parser.feed(chunk):
			frames.append(self._handle_payload(payload))
			if self.state is RelayState.DONE:
				break
		return frames

	def finish(self) -> List[RelayFrame]:
		"""Handle upstream end-of-stream; completes the relay if still streaming."""
		frames: List[RelayFrame] = []
		if self.state is not RelayState.STREAMING:
			return frames
		for payload in self._parser.flush():
			frames.append(self._handle_payload(payload))
			if self.state is RelayState.DONE:
				return frames
		frames.append(self._complete())
		return frames

	def fail(self, message: str = UPSTREAM_ERROR_MESSAGE) -> List[RelayFrame]:
		"""Move to ERRORED and return the single error frame."""
		if self.state is not RelayState.STREAMING:
			return []
		self.state = RelayState.ERRORED
		return [RelayFrame.error(message)]

	async def relay(self, chunks: AsyncIterator[bytes]) -> AsyncIterator[RelayFrame]:
		"""Consume ``chunks`` and yield frames until a terminal state is reached."""
		try:
			async for chunk in chunks:
				for frame in self.feed(chunk):
					yield frame
				if self.state is RelayState.DONE:
					return
		except (httpx.HTTPError, openai.APIError) as exc:
			logging.error("Upstream stream failed after %d chars: %s", len(self.text), exc)
			for frame in self.fail():
				yield frame
			return
		for frame in self.finish():
			yield frame

	def _handle_payload(self, payload: str) -> RelayFrame:
		if payload == DONE_SENTINEL:
			return self._complete()
		try:
			event = json.loads(payload)
		except (ValueError, RecursionError):
			return RelayFrame.raw(payload)
		token = extract_token(event)
		if token:
			self.text += token
		return RelayFrame.delta(token)

	def _complete(self) -> RelayFrame:
		self.state = RelayState.DONE
		self._on_complete(self.text)
		return RelayFrame.done()
