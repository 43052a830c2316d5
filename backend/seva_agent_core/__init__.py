from .lifecycle import IDLE, SENDING, SessionStateError, TurnLifecycle
from .message_log import MessageLog
from .models import (
    BLOOD_GROUPS,
    CanonicalResponse,
    ChatMessage,
    DonationRecord,
    Donor,
    DonorProfile,
    EmergencyContact,
    Hospital,
    OrganDonationInfo,
    Scheme,
)
from .normalizer import FAILURE_MESSAGE, default_response, failure_response, normalize_agent_response
from .sample_data import apply_sample_data
from .session import AgentCall, SessionController, new_session_id
from .session_store import SessionStore

__all__ = [
    "BLOOD_GROUPS",
    "FAILURE_MESSAGE",
    "IDLE",
    "SENDING",
    "AgentCall",
    "CanonicalResponse",
    "ChatMessage",
    "DonationRecord",
    "Donor",
    "DonorProfile",
    "EmergencyContact",
    "Hospital",
    "MessageLog",
    "OrganDonationInfo",
    "Scheme",
    "SessionController",
    "SessionStateError",
    "SessionStore",
    "TurnLifecycle",
    "apply_sample_data",
    "default_response",
    "failure_response",
    "new_session_id",
    "normalize_agent_response",
]
