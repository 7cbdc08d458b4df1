"""Build the multimodal user turn sent to the model server."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from models.session_models import Turn
from services.relay.prompts import INSTRUCTION_TEXT
from services.session_store import SessionStore


def build_user_content(image_data_url: Optional[str], instruction: str = INSTRUCTION_TEXT) -> List[Dict[str, Any]]:
	"""Return the content parts: instruction text first, then the image if one was sent.

	The image reference is forwarded as-is; a malformed data URL only
	surfaces as an upstream failure.
	"""
	content: List[Dict[str, Any]] = [{"type": "text", "text": instruction}]
	if image_data_url:
		content.append({"type": "image_url", "image_url": {"url": image_data_url}})
	return content


def append_user_turn(store: SessionStore, session_id: str, image_data_url: Optional[str]) -> Turn:
	"""Compose the user turn for this request and append it to the session log."""
	turn = Turn(role="user", content=build_user_content(image_data_url))
	store.append_turn(session_id, turn)
	return turn
