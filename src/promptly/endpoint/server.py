"""FastAPI bridge between the overlay session and the presentation layer.

The overlay window renders whatever ``GET /state`` returns and forwards
user actions as POST requests. Every action responds with the resulting
state so the window can re-render without a second round trip.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from pydantic import BaseModel, Field

from promptly.domain.models import LanguageChoice, ScoreGrade, SessionState
from promptly.session.machine import OverlaySession

logger = logging.getLogger(__name__)


class TextRequest(BaseModel):
    text: str = Field(description="Prompt or rewrite text")


class LanguageRequest(BaseModel):
    language: LanguageChoice = Field(description="Which rendition of the rewrite to show")


class StateResponse(BaseModel):
    state: SessionState
    widget_anchor: tuple[float, float] | None = Field(
        default=None, description="Logical point where the widget is drawn"
    )
    grade: ScoreGrade | None = None
    displayed_prompt: str | None = None
    analyzing: bool = False


class ActionResponse(StateResponse):
    accepted: bool = True


class BridgeStatus(BaseModel):
    status: str = "ok"
    quitting: bool = False


def create_app(session: OverlaySession, widget_offset_x: float = 20.0) -> FastAPI:
    """Create the bridge application for one session."""
    app = FastAPI(
        title="promptly bridge",
        description="Local HTTP bridge between the overlay window and its session",
        version="0.1.0",
    )
    app.state.session = session

    def snapshot(accepted: bool | None = None) -> StateResponse:
        state = session.state
        anchor = None
        if state.latest_position is not None:
            anchor = state.latest_position.widget_anchor(widget_offset_x)
        fields = dict(
            state=state,
            widget_anchor=anchor,
            grade=state.result.grade if state.result is not None else None,
            displayed_prompt=state.displayed_prompt,
            analyzing=session.is_analyzing,
        )
        if accepted is None:
            return StateResponse(**fields)
        return ActionResponse(accepted=accepted, **fields)

    @app.get("/health", response_model=BridgeStatus)
    async def health() -> BridgeStatus:
        return BridgeStatus(quitting=session.state.quitting)

    @app.get("/state", response_model=StateResponse)
    async def get_state() -> StateResponse:
        return snapshot()

    @app.post("/analyze", response_model=ActionResponse)
    async def analyze() -> StateResponse:
        return snapshot(accepted=session.analyze() is not None)

    @app.post("/reanalyze", response_model=ActionResponse)
    async def reanalyze() -> StateResponse:
        return snapshot(accepted=session.reanalyze() is not None)

    @app.post("/sidebar/toggle", response_model=ActionResponse)
    async def toggle_sidebar() -> StateResponse:
        session.toggle_sidebar()
        return snapshot(accepted=True)

    @app.post("/sidebar/close", response_model=ActionResponse)
    async def close_sidebar() -> StateResponse:
        session.close_sidebar()
        return snapshot(accepted=True)

    @app.post("/manual/open", response_model=ActionResponse)
    async def open_manual() -> StateResponse:
        session.open_manual()
        return snapshot(accepted=True)

    @app.post("/manual/submit", response_model=ActionResponse)
    async def submit_manual(req: TextRequest) -> StateResponse:
        return snapshot(accepted=session.submit_manual(req.text) is not None)

    @app.post("/prompt", response_model=ActionResponse)
    async def set_prompt(req: TextRequest) -> StateResponse:
        session.set_prompt_text(req.text)
        return snapshot(accepted=True)

    @app.post("/apply-fix", response_model=ActionResponse)
    async def apply_fix(req: TextRequest) -> StateResponse:
        return snapshot(accepted=await session.apply_fix(req.text))

    @app.post("/insert", response_model=ActionResponse)
    async def insert(req: TextRequest) -> StateResponse:
        return snapshot(accepted=session.insert(req.text) is not None)

    @app.post("/language", response_model=ActionResponse)
    async def select_language(req: LanguageRequest) -> StateResponse:
        state = await session.select_language(req.language)
        return snapshot(accepted=state.selected_language == req.language)

    @app.post("/quit", response_model=ActionResponse)
    async def quit_session() -> StateResponse:
        session.quit()
        return snapshot(accepted=True)

    return app


def create_server(app: FastAPI, host: str = "127.0.0.1", port: int = 8765):
    """Build a uvicorn server that can share the runtime's event loop."""
    import uvicorn

    config = uvicorn.Config(app, host=host, port=port, log_level="warning")
    return uvicorn.Server(config)
