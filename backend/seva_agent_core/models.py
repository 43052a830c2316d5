from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


DEFAULT_INTENT = "general"
ROLES = {"user", "agent"}
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
DEFAULT_DONOR_PHONE = "+91 XXXXX XXXXX"


@dataclass(frozen=True)
class EmergencyContact:
    name: str = ""
    number: str = ""
    description: str = ""


@dataclass(frozen=True)
class Hospital:
    name: str = ""
    type: str = ""
    address: str = ""
    phone: str = ""
    distance: str = ""


@dataclass(frozen=True)
class Donor:
    name: str = ""
    blood_group: str = ""
    city: str = ""
    distance: str = ""


@dataclass(frozen=True)
class Scheme:
    name: str = ""
    eligibility: str = ""
    documents: str = ""
    how_to_apply: str = ""
    link: str = ""


@dataclass(frozen=True)
class OrganDonationInfo:
    awareness: str = ""
    pledge_process: str = ""
    official_link: str = ""


@dataclass(frozen=True)
class CanonicalResponse:
    message: str = ""
    intent: str = DEFAULT_INTENT
    emergency_numbers: tuple[EmergencyContact, ...] = ()
    hospitals: tuple[Hospital, ...] = ()
    donors: tuple[Donor, ...] = ()
    schemes: tuple[Scheme, ...] = ()
    organ_donation_info: OrganDonationInfo = field(default_factory=OrganDonationInfo)
    consent_required: bool = False
    follow_up: str = ""

    def as_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "intent": self.intent,
            "emergency_numbers": [asdict(item) for item in self.emergency_numbers],
            "hospitals": [asdict(item) for item in self.hospitals],
            "donors": [asdict(item) for item in self.donors],
            "schemes": [asdict(item) for item in self.schemes],
            "organ_donation_info": asdict(self.organ_donation_info),
            "consent_required": self.consent_required,
            "follow_up": self.follow_up,
        }


@dataclass(frozen=True)
class ChatMessage:
    id: str
    role: str
    text: str
    timestamp: str
    seq: int = 0
    data: CanonicalResponse | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "role": self.role,
            "text": self.text,
            "timestamp": self.timestamp,
            "seq": self.seq,
        }
        if self.data is not None:
            payload["data"] = self.data.as_dict()
        return payload


@dataclass(frozen=True)
class DonationRecord:
    date: str
    requester_city: str
    status: str


@dataclass
class DonorProfile:
    name: str = ""
    blood_group: str = ""
    city: str = ""
    phone: str = DEFAULT_DONOR_PHONE
    is_active: bool = False
    donation_history: list[DonationRecord] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
