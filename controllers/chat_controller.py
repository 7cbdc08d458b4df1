"""Relay one chat turn from the browser to the model server and back."""

from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from fastapi.responses import StreamingResponse

from controllers.session_controller import resolve_session
from models.session_models import SessionState, Turn
from services.relay.composer import append_user_turn
from services.relay.errors import UpstreamUnavailableError
from services.relay.stream_relay import RelayState, StreamRelay
from services.relay.upstream import UpstreamChatClient
from services.session_store import SessionStore

SSE_MEDIA_TYPE = "text/event-stream; charset=utf-8"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def relay_events(
    store: SessionStore,
    upstream: UpstreamChatClient,
    state: SessionState,
    user_turn: Turn,
) -> AsyncIterator[bytes]:
    """Yield encoded relay frames for one request.

    The assistant turn is committed only when the relay reaches DONE. In
    every other outcome (upstream failure, mid-stream error, client
    disconnect) the user turn appended for this request is rolled back.
    """
    session_id = state.session_id

    def commit(text: str) -> None:
        store.append_turn(session_id, Turn(role="assistant", content=text))
        logging.info("Session %s: committed assistant reply (%d chars)", session_id[:8], len(text))

    relay = StreamRelay(on_complete=commit)
    try:
        try:
            async with upstream.open_stream(state.messages()) as chunks:
                async for frame in relay.relay(chunks):
                    yield frame.encode()
        except UpstreamUnavailableError as exc:
            logging.warning("Session %s: upstream unavailable: %s", session_id[:8], exc)
            for frame in relay.fail():
                yield frame.encode()
    finally:
        if relay.state is not RelayState.DONE:
            if relay.state is RelayState.STREAMING:
                logging.info("Session %s: client disconnected, upstream read cancelled", session_id[:8])
            store.discard_turn(session_id, user_turn)


async def stream_chat(request: Request, image_data_url: Optional[str]) -> StreamingResponse:
    """Append the user turn and return the event stream for the reply.

    Args:
        request: FastAPI request carrying the session cookie and app state.
        image_data_url: Optional ``data:`` URL of the image to analyse.

    Returns:
        A ``text/event-stream`` response; sets the session cookie on first contact.
    """
    store: SessionStore = request.app.state.session_store
    upstream: UpstreamChatClient = request.app.state.upstream_client

    session = resolve_session(request, store)
    user_turn = append_user_turn(store, session.session_id, image_data_url)

    response = StreamingResponse(
        relay_events(store, upstream, session.state, user_turn),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
    session.apply_cookie(response)
    return response
