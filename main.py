import inspect
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present; before the gateway reads them

from routes.realtime_ws import router as realtime_router
from routes.workspace_route import router as workspace_router
from services.openai.gateway import StoryboardGateway
from services.workspace_store import WorkspaceStore
from utils.logging_setup import configure_logging

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the storyboard gateway wrapping one shared OpenAI async client
      - the in-memory workspace store that hands the gateway to every workspace
    and attach them to `app.state`.
    """
    # A missing OPENAI_API_KEY leaves the gateway unconfigured; runs then
    # report the missing credential as their error instead of failing startup.
    gateway = StoryboardGateway.from_env()
    app.state.gateway = gateway
    app.state.workspace_store = WorkspaceStore(gateway)

    try:
        yield
    finally:
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state.gateway, "client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    LOGGER.warning("Failed to close OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    configure_logging()
    app = FastAPI(title="Storyboard Studio", lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

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
        Simple health check that reports the workspace store and OpenAI client presence.
        """
        gateway = getattr(request.app.state, "gateway", None)
        store = getattr(request.app.state, "workspace_store", None)
        return {
            "ok": True,
            "openai_available": bool(gateway is not None and gateway.configured),
            "workspaces": len(store) if store is not None else 0,
        }

    # Register application routers
    app.include_router(workspace_router)
    app.include_router(realtime_router)

    return app


app = create_app()
