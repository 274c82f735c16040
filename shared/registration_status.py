from enum import Enum
from typing import Optional, List


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    REGISTERED = "REGISTERED"


STATUS_DESCRIPTIONS = {
    RegistrationStatus.PENDING: "Registration created but not yet submitted",
    RegistrationStatus.SUBMITTED: "Registration submitted for review",
    RegistrationStatus.REGISTERED: "Registration approved and confirmed",
}

# Lifecycle order. The services do not enforce it; callers may.
STATUS_ORDER: List[RegistrationStatus] = [
    RegistrationStatus.PENDING,
    RegistrationStatus.SUBMITTED,
    RegistrationStatus.REGISTERED,
]

DEFAULT_STATUS = RegistrationStatus.PENDING


def parse_status(value) -> Optional[RegistrationStatus]:
    """Return the matching status for a string (case-insensitive), or None."""
    if isinstance(value, RegistrationStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return RegistrationStatus(value.strip().upper())
    except ValueError:
        return None


def describe(status: RegistrationStatus) -> str:
    return STATUS_DESCRIPTIONS.get(status, "")


def is_forward_transition(from_status: RegistrationStatus, to_status: RegistrationStatus) -> bool:
    """True when to_status is the same as or later than from_status."""
    return STATUS_ORDER.index(to_status) >= STATUS_ORDER.index(from_status)


def next_status(status: RegistrationStatus) -> Optional[RegistrationStatus]:
    idx = STATUS_ORDER.index(status)
    if idx + 1 < len(STATUS_ORDER):
        return STATUS_ORDER[idx + 1]
    return None
