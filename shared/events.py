from enum import Enum
from dataclasses import dataclass
from datetime import datetime
import json


class EventType(str, Enum):
    # Registrations
    CHOREOGRAPHY_REGISTERED = "choreography.registered"
    CHOREOGRAPHY_UPDATED = "choreography.updated"
    CHOREOGRAPHY_REMOVED = "choreography.removed"
    COACH_REGISTERED = "coach.registered"
    COACH_UPDATED = "coach.updated"
    COACH_REMOVED = "coach.removed"
    JUDGE_REGISTERED = "judge.registered"
    JUDGE_UPDATED = "judge.updated"
    JUDGE_REMOVED = "judge.removed"
    SUPPORT_REGISTERED = "support.registered"
    SUPPORT_UPDATED = "support.updated"
    SUPPORT_REMOVED = "support.removed"
    REGISTRATION_FAILED = "registration.failed"

    # Batches
    BATCH_COMPLETED = "batch.completed"

    # Status lifecycle
    STATUS_CHANGED = "status.changed"


@dataclass
class Event:
    type: EventType
    tournament_id: str
    timestamp: str = None
    data: dict = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.utcnow().isoformat() + "Z"
        if self.data is None:
            self.data = {}

    def to_dict(self) -> dict:
        return {
            "type": self.type.value if isinstance(self.type, EventType) else self.type,
            "tournament_id": self.tournament_id,
            "timestamp": self.timestamp,
            "data": self.data
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        return cls(
            type=EventType(data["type"]) if data["type"] in [e.value for e in EventType] else data["type"],
            tournament_id=data["tournament_id"],
            timestamp=data.get("timestamp"),
            data=data.get("data", {})
        )

    @classmethod
    def from_json(cls, json_str: str) -> "Event":
        return cls.from_dict(json.loads(json_str))


_REGISTERED = {
    "choreography": EventType.CHOREOGRAPHY_REGISTERED,
    "coach": EventType.COACH_REGISTERED,
    "judge": EventType.JUDGE_REGISTERED,
    "support": EventType.SUPPORT_REGISTERED,
}

_UPDATED = {
    "choreography": EventType.CHOREOGRAPHY_UPDATED,
    "coach": EventType.COACH_UPDATED,
    "judge": EventType.JUDGE_UPDATED,
    "support": EventType.SUPPORT_UPDATED,
}

_REMOVED = {
    "choreography": EventType.CHOREOGRAPHY_REMOVED,
    "coach": EventType.COACH_REMOVED,
    "judge": EventType.JUDGE_REMOVED,
    "support": EventType.SUPPORT_REMOVED,
}


def registered_event(kind: str, tournament_id: str, entry_id: str, name: str, country: str) -> Event:
    return Event(
        type=_REGISTERED[kind],
        tournament_id=tournament_id,
        data={
            "id": entry_id,
            "name": name,
            "country": country
        }
    )


def updated_event(kind: str, tournament_id: str, entry_id: str, name: str, changed: list) -> Event:
    return Event(
        type=_UPDATED[kind],
        tournament_id=tournament_id,
        data={
            "id": entry_id,
            "name": name,
            "changed": changed
        }
    )


def removed_event(kind: str, tournament_id: str, entry_id: str, name: str) -> Event:
    return Event(
        type=_REMOVED[kind],
        tournament_id=tournament_id,
        data={
            "id": entry_id,
            "name": name
        }
    )


def registration_failed_event(kind: str, tournament_id: str, name: str, reason: str) -> Event:
    return Event(
        type=EventType.REGISTRATION_FAILED,
        tournament_id=tournament_id,
        data={
            "kind": kind,
            "name": name,
            "reason": reason
        }
    )


def batch_completed_event(tournament_id: str, country: str, registered: int, attempted: int) -> Event:
    return Event(
        type=EventType.BATCH_COMPLETED,
        tournament_id=tournament_id,
        data={
            "country": country,
            "registered": registered,
            "attempted": attempted
        }
    )


def status_changed_event(kind: str, tournament_id: str, from_status: str, to_status: str, count: int) -> Event:
    return Event(
        type=EventType.STATUS_CHANGED,
        tournament_id=tournament_id,
        data={
            "kind": kind,
            "from_status": from_status,
            "to_status": to_status,
            "count": count
        }
    )
