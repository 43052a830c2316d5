from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from agent_gateway import AgentGatewayClient
from observability import get_logger, setup_logging
from seva_agent_core import (
    AgentCall,
    SessionController,
    SessionStateError,
    SessionStore,
    apply_sample_data,
)
from settings import Settings, load_settings

log = get_logger(__name__)


class SubmitMessageRequest(BaseModel):
    text: str


class SampleDataRequest(BaseModel):
    enabled: bool


class DonationRecordPayload(BaseModel):
    date: str = ""
    requester_city: str = ""
    status: str = ""


class DonorProfilePatch(BaseModel):
    name: str | None = None
    blood_group: str | None = None
    city: str | None = None
    phone: str | None = None
    is_active: bool | None = None
    donation_history: list[DonationRecordPayload] | None = Field(default=None)


class SevaHealthApp:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.gateway = AgentGatewayClient(
            settings.agent_api_url,
            api_key=settings.agent_api_key,
            timeout_seconds=settings.agent_timeout_seconds,
        )
        self.agent_call: AgentCall = self.gateway.call
        self.sessions = SessionStore(self._new_session)

    def _new_session(self) -> SessionController:
        return SessionController(agent_call=self._dispatch, agent_id=self.settings.agent_id)

    async def _dispatch(self, text: str, agent_id: str, options: dict[str, str]) -> Any:
        return await self.agent_call(text, agent_id, options)


settings = load_settings()
setup_logging(settings.log_level, json_format=settings.log_json)

container = SevaHealthApp(settings)
app = FastAPI(title="Seva Health Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _require_session(session_id: str) -> SessionController:
    session = await container.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    return session


@app.get("/health")
def health():
    return {
        "status": "ok",
        "agent_id": container.settings.agent_id,
        "agent_name": container.settings.agent_name,
        "sessions": len(container.sessions),
    }


@app.post("/sessions", status_code=201)
async def create_session():
    session = await container.sessions.create()
    return session.snapshot()


@app.get("/sessions/{session_id}")
async def get_session(session_id: str):
    session = await _require_session(session_id)
    return session.snapshot()


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    if not await container.sessions.remove(session_id):
        raise HTTPException(status_code=404, detail="Session not found.")
    return {"ok": True}


@app.post("/sessions/{session_id}/messages")
async def submit_message(session_id: str, payload: SubmitMessageRequest):
    session = await _require_session(session_id)
    reply = await session.submit(payload.text)
    return {
        "accepted": reply is not None,
        "reply": reply.as_dict() if reply is not None else None,
        "state": session.state,
    }


@app.put("/sessions/{session_id}/sample-data")
async def set_sample_data(session_id: str, payload: SampleDataRequest):
    session = await _require_session(session_id)
    try:
        apply_sample_data(session, payload.enabled)
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return session.snapshot()


@app.get("/sessions/{session_id}/donor-profile")
async def get_donor_profile(session_id: str):
    session = await _require_session(session_id)
    return session.donor_profile.as_dict()


@app.put("/sessions/{session_id}/donor-profile")
async def update_donor_profile(session_id: str, payload: DonorProfilePatch):
    session = await _require_session(session_id)
    changes = payload.model_dump(exclude_unset=True)
    try:
        profile = session.update_donor_profile(**changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    log.info("donor_profile.updated", session_id=session_id, fields=sorted(changes))
    return profile.as_dict()
