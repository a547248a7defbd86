from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from ...config import AppSettings, ServerSettings, get_settings
from ...data import build_event_store
from ..sessions import ClientSession
from ..sync import SyncServer

logger = logging.getLogger(__name__)


def _resolve_asset(root: Path, requested: str) -> Optional[Path]:
    if not requested:
        return None
    candidate = (root / requested).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


def create_app(sync: SyncServer, settings: ServerSettings) -> FastAPI:
    """Build the ASGI app: the ``/ws`` relay plus the static client bundle."""

    app = FastAPI(title="When", version="1.0.0")
    app.state.sync = sync
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.websocket("/ws")
    async def events_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        session = ClientSession(websocket)
        await sync.on_connect(session)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                text = message.get("text")
                if text is None:
                    logger.warning("Ignoring binary frame from session %s", session.id)
                    continue
                try:
                    raw = json.loads(text)
                except json.JSONDecodeError:
                    logger.warning("Ignoring non-JSON frame from session %s", session.id)
                    continue
                await sync.dispatch(session, raw)
        except WebSocketDisconnect:
            logger.debug("Session %s closed its socket", session.id)
        finally:
            sync.on_disconnect(session)

    static_root = settings.static_dir.resolve()

    # Anything that is not a bundle file gets index.html so client-side routes load.
    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_client(full_path: str) -> FileResponse:
        asset = _resolve_asset(static_root, full_path)
        if asset is not None:
            return FileResponse(asset)
        index = static_root / "index.html"
        if not index.is_file():
            raise HTTPException(status_code=404, detail="Client bundle not found")
        return FileResponse(index)

    return app


def build_app(settings: Optional[AppSettings] = None) -> FastAPI:
    resolved = settings or get_settings()
    sync = SyncServer(build_event_store(resolved))
    return create_app(sync, resolved.server)


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    import asyncio
    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    settings = get_settings()
    app = build_app(settings)
    config = Config()
    config.bind = [f"{host or settings.server.host}:{port or settings.server.port}"]
    logger.info("Server listening on %s", config.bind[0])
    asyncio.run(serve(app, config))
