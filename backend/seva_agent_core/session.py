from __future__ import annotations

import uuid
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable

from observability import bind_session, clear_session, get_logger

from .lifecycle import SessionStateError, TurnLifecycle
from .message_log import MessageLog
from .models import BLOOD_GROUPS, CanonicalResponse, ChatMessage, DonationRecord, DonorProfile
from .normalizer import failure_response, normalize_agent_response
from .time_utils import to_iso, utc_now

log = get_logger(__name__)

AgentCall = Callable[[str, str, dict[str, str]], Awaitable[Any]]

_PROFILE_FIELDS = {item.name for item in fields(DonorProfile)}


def new_session_id() -> str:
    return str(uuid.uuid4())


def _coerce_donation_history(value: Any) -> list[DonationRecord]:
    if not isinstance(value, (list, tuple)):
        raise ValueError("donation_history must be a list.")
    history: list[DonationRecord] = []
    for item in value:
        if isinstance(item, DonationRecord):
            history.append(item)
        elif isinstance(item, dict):
            history.append(
                DonationRecord(
                    date=str(item.get("date") or ""),
                    requester_city=str(item.get("requester_city") or ""),
                    status=str(item.get("status") or ""),
                )
            )
        else:
            raise ValueError("donation_history entries must be objects.")
    return history


class SessionController:
    """
    One chat session with the health agent.

    ``submit`` is the only path that appends chat messages. While a reply is
    pending the session is ``sending`` and further submissions are dropped.
    """

    def __init__(
        self,
        *,
        agent_call: AgentCall,
        agent_id: str,
        session_id_factory: Callable[[], str] = new_session_id,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_id = session_id_factory()
        self._agent_call = agent_call
        self._agent_id = agent_id
        self._clock = clock
        self._log = MessageLog()
        self._lifecycle = TurnLifecycle()
        self._last_seq = 0
        self._donor_profile = DonorProfile()

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def agent_id(self) -> str:
        return self._agent_id

    @property
    def state(self) -> str:
        return self._lifecycle.state

    @property
    def in_flight(self) -> bool:
        return self._lifecycle.in_flight

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self._log.snapshot()

    @property
    def donor_profile(self) -> DonorProfile:
        return replace(self._donor_profile, donation_history=list(self._donor_profile.donation_history))

    def _new_message(self, kind: str, role: str, text: str, data: CanonicalResponse | None = None) -> ChatMessage:
        self._last_seq += 1
        seq = self._last_seq
        return ChatMessage(
            id=f"{kind}-{seq}",
            role=role,
            text=text,
            timestamp=to_iso(self._clock()),
            seq=seq,
            data=data,
        )

    async def submit(self, text: str) -> ChatMessage | None:
        cleaned = (text or "").strip()
        if not cleaned:
            return None
        if not self._lifecycle.try_begin():
            log.info("session.turn.dropped", session_id=self._session_id, reason="in_flight")
            return None

        bind_session(self._session_id)
        try:
            self._log.append(self._new_message("user", "user", cleaned))
            log.info("session.turn.start", chars=len(cleaned), agent_id=self._agent_id)
            try:
                envelope = await self._agent_call(cleaned, self._agent_id, {"session_id": self._session_id})
            except Exception as exc:
                log.warning("session.turn.transport_failed", error=str(exc), error_type=type(exc).__name__)
                response = failure_response()
                kind = "error"
            else:
                response = normalize_agent_response(envelope)
                kind = "agent"
            reply = self._log.append(self._new_message(kind, "agent", response.message, data=response))
            log.info("session.turn.complete", message_id=reply.id, intent=response.intent)
            return reply
        finally:
            self._lifecycle.finish()
            clear_session()

    def update_donor_profile(self, **changes: Any) -> DonorProfile:
        unknown = set(changes) - _PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown donor profile fields: {', '.join(sorted(unknown))}")
        blood_group = changes.get("blood_group")
        if blood_group and blood_group not in BLOOD_GROUPS:
            raise ValueError(f"Unknown blood group: {blood_group}")
        if "is_active" in changes:
            changes["is_active"] = bool(changes["is_active"])
        if "donation_history" in changes:
            changes["donation_history"] = _coerce_donation_history(changes["donation_history"])
        for key in ("name", "blood_group", "city", "phone"):
            if key in changes:
                changes[key] = str(changes[key] or "")
        self._donor_profile = replace(self._donor_profile, **changes)
        return self.donor_profile

    def replace_session_data(self, messages: Iterable[ChatMessage], donor_profile: DonorProfile) -> None:
        """Administrative swap of the whole log and donor profile; never used by ``submit``."""
        if self._lifecycle.in_flight:
            raise SessionStateError("Session data cannot be replaced while a reply is pending.")
        replacement = list(messages)
        self._log.replace_all(replacement)
        # Later messages must still sort after whatever was loaded.
        self._last_seq = max([self._last_seq, *(message.seq for message in replacement)])
        self._donor_profile = replace(donor_profile, donation_history=list(donor_profile.donation_history))
        log.info("session.data.replaced", session_id=self._session_id, messages=len(self._log))

    def snapshot(self) -> dict[str, Any]:
        return {
            "session_id": self._session_id,
            "agent_id": self._agent_id,
            "state": self.state,
            "messages": [message.as_dict() for message in self._log],
            "donor_profile": self._donor_profile.as_dict(),
        }
