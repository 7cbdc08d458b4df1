"""Simple in-memory store for chat sessions."""

from __future__ import annotations

from typing import Dict, Optional

from models.session_models import SessionState, Turn


class SessionStore:
	"""Map session ids to their conversation logs.

	The store lives for the whole process. ``max_turns`` bounds how many
	turns each session keeps; ``None`` keeps the full history.
	"""

	def __init__(self, max_turns: Optional[int] = None) -> None:
		if max_turns is not None and max_turns < 2:
			raise ValueError("max_turns must be at least 2 (one user/assistant pair) or None.")
		self.max_turns = max_turns
		self._sessions: Dict[str, SessionState] = {}

	def __len__(self) -> int:
		return len(self._sessions)

	def __contains__(self, session_id: object) -> bool:
		return session_id in self._sessions

	def get_or_create(self, session_id: str) -> SessionState:
		"""Return the session for ``session_id``, creating an empty one if unknown."""
		state = self._sessions.get(session_id)
		if state is None:
			state = SessionState(session_id=session_id)
			self._sessions[session_id] = state
		return state

	def get(self, session_id: str) -> SessionState:
		"""Return a session or raise KeyError if missing."""
		state = self._sessions.get(session_id)
		if state is None:
			raise KeyError(f"Session {session_id} not found")
		return state

	def append_turn(self, session_id: str, turn: Turn) -> SessionState:
		"""Append a turn to the session log.

		The turn cap is applied when an assistant turn completes a pair, so a
		pending user turn is never trimmed and the log always opens with a
		user turn.
		"""
		state = self.get(session_id)
		state.turns.append(turn)
		if self.max_turns is not None and turn.role == "assistant":
			self._trim(state)
		return state

	def _trim(self, state: SessionState) -> None:
		turns = state.turns
		if len(turns) > self.max_turns:
			del turns[: len(turns) - self.max_turns]
		while turns and turns[0].role != "user":
			turns.pop(0)

	def discard_turn(self, session_id: str, turn: Turn) -> bool:
		"""Remove ``turn`` if it is still the last entry of the session log.

		Used to roll back a user turn whose request never completed. Returns
		whether anything was removed.
		"""
		state = self.get(session_id)
		if state.turns and state.turns[-1] is turn:
			state.turns.pop()
			return True
		return False
