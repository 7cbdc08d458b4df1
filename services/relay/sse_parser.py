"""Incremental parser for server-sent-event byte streams.

Chunks from the network rarely line up with event boundaries: a frame can
be split across reads and a multi-byte UTF-8 character can straddle two
chunks. ``SseFrameParser`` keeps both a decoder carry-over and a text
buffer, and only releases a frame once its blank-line terminator has been
seen (or the stream has ended).
"""

from __future__ import annotations

import codecs
from typing import List, Optional

DATA_PREFIX = "data:"
FRAME_SEPARATOR = "\n\n"


def extract_data_payload(frame: str) -> Optional[str]:
	"""Return the payload of a ``data:`` frame, or None for any other frame."""
	line = frame.strip()
	if not line.startswith(DATA_PREFIX):
		return None
	return line[len(DATA_PREFIX):].strip()


class SseFrameParser:
	"""Split a byte stream into ``data:`` payloads, one per complete frame."""

	def __init__(self, encoding: str = "utf-8") -> None:
		self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
		self._buffer = ""

	def feed(self, chunk: bytes) -> List[str]:
		"""Consume one chunk and return payloads of the frames it completed."""
		self._buffer += self._decoder.decode(chunk)
		self._buffer = self._buffer.replace("\r\n", "\n")
		*frames, self._buffer = self._buffer.split(FRAME_SEPARATOR)
		return self._payloads(frames)

	def flush(self) -> List[str]:
		"""Return the payload of any trailing frame left when the stream ends."""
		tail = self._buffer + self._decoder.decode(b"", final=True)
		self._buffer = ""
		tail = tail.replace("\r\n", "\n")
		return self._payloads(tail.split(FRAME_SEPARATOR))

	@staticmethod
	def _payloads(frames: List[str]) -> List[str]:
		payloads = []
		for frame in frames:
			payload = extract_data_payload(frame)
			if payload is not None:
				payloads.append(payload)
		return payloads
