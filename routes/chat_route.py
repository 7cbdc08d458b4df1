"""FastAPI route for streaming chat turns."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from controllers.chat_controller import stream_chat

router = APIRouter()


class ChatPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_data_url: Optional[str] = Field(default=None, alias="imageDataUrl")


@router.post("/chat")
async def post_chat(request: Request, payload: Optional[ChatPayload] = None):
    """Stream the model's reply to an (optional) image as server-sent events."""
    image_data_url = payload.image_data_url if payload else None
    try:
        return await stream_chat(request, image_data_url)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
