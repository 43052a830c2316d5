from __future__ import annotations

from .models import (
    CanonicalResponse,
    ChatMessage,
    DonationRecord,
    DonorProfile,
    EmergencyContact,
    Hospital,
    Scheme,
)
from .session import SessionController


def sample_messages() -> tuple[ChatMessage, ...]:
    return (
        ChatMessage(
            id="sample-1",
            role="user",
            text="I need emergency help",
            timestamp="2025-02-10T10:00:00+00:00",
            seq=1,
        ),
        ChatMessage(
            id="sample-2",
            role="agent",
            text="",
            timestamp="2025-02-10T10:01:00+00:00",
            seq=2,
            data=CanonicalResponse(
                message=(
                    "Here are the emergency numbers you can reach out to immediately. "
                    "Please stay calm and call the nearest service."
                ),
                intent="emergency",
                emergency_numbers=(
                    EmergencyContact("Ambulance", "108", "Emergency ambulance service available 24/7 across India"),
                    EmergencyContact("Police", "100", "Police emergency helpline"),
                    EmergencyContact("Women Helpline", "181", "Women in distress helpline"),
                ),
                follow_up="Would you like me to find the nearest hospital to your location?",
            ),
        ),
        ChatMessage(
            id="sample-3",
            role="user",
            text="Find nearby hospitals",
            timestamp="2025-02-10T10:02:00+00:00",
            seq=3,
        ),
        ChatMessage(
            id="sample-4",
            role="agent",
            text="",
            timestamp="2025-02-10T10:03:00+00:00",
            seq=4,
            data=CanonicalResponse(
                message="Here are the hospitals near your area. You can call or navigate to any of them.",
                intent="hospital_finder",
                hospitals=(
                    Hospital("Apollo Hospital", "Multi-Specialty", "Jubilee Hills, Hyderabad", "040-23607777", "2.5 km"),
                    Hospital("NIMS Hospital", "Government", "Punjagutta, Hyderabad", "040-23390000", "4.0 km"),
                    Hospital("Care Hospital", "Super-Specialty", "Banjara Hills, Hyderabad", "040-30418888", "3.2 km"),
                ),
                follow_up="Do you need directions to any of these hospitals?",
            ),
        ),
        ChatMessage(
            id="sample-5",
            role="user",
            text="Tell me about government health schemes",
            timestamp="2025-02-10T10:05:00+00:00",
            seq=5,
        ),
        ChatMessage(
            id="sample-6",
            role="agent",
            text="",
            timestamp="2025-02-10T10:06:00+00:00",
            seq=6,
            data=CanonicalResponse(
                message="Here are some government health schemes available for you and your family.",
                intent="schemes",
                schemes=(
                    Scheme(
                        "Ayushman Bharat (PM-JAY)",
                        "Families listed in SECC database, annual income below 5 lakh",
                        "Aadhaar Card, Ration Card, Income Certificate",
                        "Visit nearest CSC center or Ayushman Mitra at empanelled hospital",
                        "https://pmjay.gov.in",
                    ),
                    Scheme(
                        "Aarogyasri Health Insurance",
                        "Below Poverty Line families in Telangana with white ration card",
                        "Aarogyasri Card, Aadhaar, White Ration Card",
                        "Visit network hospital with Aarogyasri card, treatment is cashless",
                        "https://aarogyasri.telangana.gov.in",
                    ),
                ),
                follow_up="Would you like details about eligibility for any specific scheme?",
            ),
        ),
    )


def sample_donor_profile() -> DonorProfile:
    return DonorProfile(
        name="Ravi Kumar",
        blood_group="O+",
        city="Hyderabad",
        phone="+91 98765 43210",
        is_active=True,
        donation_history=[
            DonationRecord(date="2025-01-15", requester_city="Secunderabad", status="Completed"),
            DonationRecord(date="2024-11-20", requester_city="Hyderabad", status="Completed"),
            DonationRecord(date="2024-08-05", requester_city="Warangal", status="Cancelled"),
        ],
    )


def apply_sample_data(controller: SessionController, enabled: bool) -> None:
    """Load the demonstration conversation and donor, or clear them back to an empty session."""
    if enabled:
        controller.replace_session_data(sample_messages(), sample_donor_profile())
    else:
        controller.replace_session_data((), DonorProfile())
