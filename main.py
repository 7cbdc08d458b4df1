import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from routes.chat_route import router as chat_router
from services.relay.upstream import UpstreamChatClient
from services.session_store import SessionStore
from utils.settings import Settings, load_settings

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"


def create_app(settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        settings: Settings to use; read from the environment when omitted.
        http_client: Optional transport for the model server client.
    """
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format="[%(asctime)s] %(levelname)s - %(message)s")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan manager to initialize:
          - the in-memory session store
          - the OpenAI async client pointed at the local model server
        and attach them to `app.state`.
        """
        app.state.session_store = SessionStore(max_turns=settings.session_max_turns)

        try:
            openai_client = AsyncOpenAI(
                base_url=settings.lm_base_url,
                api_key=settings.lm_api_key,
                max_retries=0,
                timeout=None,
                http_client=http_client,
            )
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc

        app.state.openai_client = openai_client
        app.state.upstream_client = UpstreamChatClient(openai_client, settings.lm_model)
        logging.info("Relaying to %s (model %s)", settings.lm_base_url, settings.lm_model)

        try:
            yield
        finally:
            try:
                await openai_client.close()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logging.warning("Failed to close OpenAI client: %s", exc)

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Report the number of live sessions and whether the model client is ready.
        """
        store = getattr(request.app.state, "session_store", None)
        has_upstream = getattr(request.app.state, "upstream_client", None) is not None
        return {"ok": True, "sessions": len(store) if store is not None else 0, "upstream_available": has_upstream}

    app.include_router(chat_router)

    # Serve the client app from the public directory at the site root, behind the API routes.
    if PUBLIC_DIR.exists():
        app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True), name="public")

    return app


app = create_app()


def main():  # pragma: no cover
    import uvicorn

    settings = app.state.settings
    logging.info("Web UI on http://localhost:%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":  # pragma: no cover
    main()
