"""CellMate tutoring session served with FastAPI.

Run with:
    cellmate
"""

from __future__ import annotations as _annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Annotated, Literal, Optional

import fastapi
import logfire
from fastapi import Depends, Request
from fastapi.responses import Response, StreamingResponse
from pydantic import BaseModel, ConfigDict

from cellmate.client import TutorClient
from cellmate.config import Settings
from cellmate.conversation import ConversationController, TextGenerator
from cellmate.diagnostics import configure_logging
from cellmate.utils import to_chat_message
from cellmate.viewer import MoleculeViewer


class SelectVariant(BaseModel):
    variant: str


class PointerEvent(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    kind: Literal["drag", "scroll", "pan"]
    dx: float = 0.0
    dy: float = 0.0
    delta: float = 0.0


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[TextGenerator] = None,
    viewer: Optional[MoleculeViewer] = None,
) -> fastapi.FastAPI:
    """Build the app; the client and viewer are created on startup unless given."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(_app: fastapi.FastAPI):
        """Mount the conversation and the viewer for the life of the server."""
        controller = ConversationController(client or TutorClient.from_settings(settings))
        molecule_viewer = viewer or MoleculeViewer(frame_interval=settings.frame_interval)
        try:
            async with molecule_viewer.mounted():
                yield {"controller": controller, "viewer": molecule_viewer}
        finally:
            controller.close()

    app = fastapi.FastAPI(lifespan=lifespan)

    async def get_controller(request: Request) -> ConversationController:
        return request.state.controller

    async def get_viewer(request: Request) -> MoleculeViewer:
        return request.state.viewer

    @app.get("/chat/")
    async def get_chat(controller: ConversationController = Depends(get_controller)) -> Response:
        """Get all chat messages."""
        lines = [json.dumps(to_chat_message(m)).encode("utf-8") for m in controller.conversation]
        return Response(b"\n".join(lines), media_type="text/plain")

    @app.post("/chat/")
    async def post_chat(
        prompt: Annotated[str, fastapi.Form()],
        controller: ConversationController = Depends(get_controller),
    ) -> StreamingResponse:
        """Submit a question and stream the messages of the resulting turn.

        Blank prompts and prompts sent while a turn is pending stream nothing.
        """
        if not prompt.strip() or controller.pending:
            return StreamingResponse(iter(()), media_type="text/plain")

        async def stream_messages():
            """Streams new line delimited JSON `ChatMessage`s to the client."""
            queue: asyncio.Queue = asyncio.Queue()
            seen = len(controller.conversation)
            unsubscribe = controller.subscribe(queue.put_nowait)
            try:
                turn = asyncio.ensure_future(controller.submit(prompt))
                turn.add_done_callback(lambda _: queue.put_nowait(None))
                while True:
                    snapshot = await queue.get()
                    if snapshot is None:
                        break
                    for m in snapshot.messages[seen:]:
                        yield json.dumps(to_chat_message(m)).encode("utf-8") + b"\n"
                    seen = len(snapshot.messages)
                await turn
            finally:
                unsubscribe()

        return StreamingResponse(stream_messages(), media_type="text/plain")

    @app.get("/chat/state")
    async def get_chat_state(controller: ConversationController = Depends(get_controller)) -> dict:
        return {
            "pending": controller.pending,
            "draft": controller.draft,
            "suggestions": list(controller.suggestions),
        }

    @app.get("/viewer/")
    async def get_viewer_panel(viewer: MoleculeViewer = Depends(get_viewer)) -> dict:
        """Variant buttons and the info panel for the active variant."""
        return {"buttons": viewer.buttons, "info": viewer.info}

    @app.post("/viewer/select")
    async def select_variant(body: SelectVariant, viewer: MoleculeViewer = Depends(get_viewer)) -> dict:
        return viewer.select(body.variant)

    @app.get("/viewer/scene")
    async def get_scene(viewer: MoleculeViewer = Depends(get_viewer)) -> dict:
        return viewer.scene.to_dict()

    @app.get("/viewer/frame")
    async def get_frame(viewer: MoleculeViewer = Depends(get_viewer)):
        """Latest rendered frame; 204 until the first tick after mount or a switch."""
        if viewer.frame is None:
            return Response(status_code=204)
        return viewer.frame.to_dict()

    @app.post("/viewer/pointer", status_code=202)
    async def post_pointer(event: PointerEvent, viewer: MoleculeViewer = Depends(get_viewer)) -> dict:
        """Queue pointer input; it is applied on the next frame."""
        if event.kind == "drag":
            viewer.drag(event.dx, event.dy)
        elif event.kind == "scroll":
            viewer.scroll(event.delta)
        else:
            viewer.pan(event.dx, event.dy)
        return {"accepted": event.kind}

    return app


def main() -> None:
    import uvicorn

    configure_logging()
    settings = Settings.from_env()
    app = create_app(settings)
    logfire.instrument_fastapi(app)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
