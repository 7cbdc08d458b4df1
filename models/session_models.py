"""Session domain models for the chat relay."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

TurnContent = Union[str, List[Dict[str, Any]]]


@dataclass(frozen=True)
class Turn:
	"""One message in a conversation log.

	User turns carry a list of content parts (text and image_url entries);
	assistant turns carry plain text.
	"""

	role: str
	content: TurnContent
	created_at: float = field(default_factory=lambda: time.time(), compare=False)

	def to_message(self) -> Dict[str, Any]:
		"""Return the chat-completions message dict for this turn."""
		return {"role": self.role, "content": self.content}


@dataclass
class SessionState:
	"""In-memory conversation state for one browser session."""

	session_id: str
	turns: List[Turn] = field(default_factory=list)

	def messages(self) -> List[Dict[str, Any]]:
		return [turn.to_message() for turn in self.turns]
