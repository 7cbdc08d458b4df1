"""Resolve the browser's session cookie to a conversation log."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from fastapi import Request, Response

from models.session_models import SessionState
from services.session_store import SessionStore

SESSION_COOKIE = "sid"


@dataclass
class ResolvedSession:
	"""The session a request belongs to and whether it was just minted."""

	session_id: str
	state: SessionState
	created: bool = False

	def apply_cookie(self, response: Response) -> None:
		"""Set the session cookie on ``response`` when the session is new."""
		if self.created:
			response.set_cookie(SESSION_COOKIE, self.session_id, httponly=True, samesite="lax")


def new_session_id() -> str:
	"""Return a random 128-bit session id as hex."""
	return secrets.token_hex(16)


def resolve_session(request: Request, store: SessionStore) -> ResolvedSession:
	"""Return the session for this request, minting a new id if no cookie was sent.

	Ids arriving in the cookie are trusted as-is; an unknown id simply gets
	an empty log.
	"""
	session_id = request.cookies.get(SESSION_COOKIE)
	created = False
	if not session_id:
		session_id = new_session_id()
		created = True
		logging.info("Minted new session %s", session_id[:8])
	state = store.get_or_create(session_id)
	return ResolvedSession(session_id=session_id, state=state, created=created)
