import logging
from typing import Optional

import redis

from shared.events import (
    Event,
    registered_event,
    updated_event,
    removed_event,
    registration_failed_event,
    batch_completed_event,
    status_changed_event,
)

logger = logging.getLogger(__name__)


class RegistrationNotifier:
    """
    Publishes registration events to Redis.

    Without a Redis client the notifier runs in local mode and only logs
    what it would have published. Publishing never affects the outcome of a
    registration: failures are logged and swallowed.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None, publish: bool = True):
        self.redis = redis_client
        self.publish_enabled = publish and redis_client is not None
        if not self.publish_enabled:
            logger.info("RegistrationNotifier running in local mode (events are only logged)")

    @classmethod
    def from_url(cls, redis_url: str, publish: bool = True) -> "RegistrationNotifier":
        if not redis_url or not publish:
            return cls(None, publish=False)
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        return cls(client, publish=publish)

    @staticmethod
    def channel_for(tournament_id: str) -> str:
        return f"tournament:{tournament_id}:registrations"

    def publish(self, event: Event) -> bool:
        if not self.publish_enabled:
            logger.info(f"Local mode: {event.type.value} for {event.tournament_id}: {event.data}")
            return False
        try:
            payload = event.to_json()
            self.redis.publish(self.channel_for(event.tournament_id), payload)
            self.redis.publish("global:announcements", payload)
            return True
        except redis.RedisError as e:
            logger.error(f"Failed to publish {event.type.value} for {event.tournament_id}: {e}")
            return False

    def registered(self, kind: str, entry) -> bool:
        return self.publish(registered_event(
            kind, entry.tournament_id, entry.id, entry.display_name, entry.country
        ))

    def updated(self, kind: str, entry, changed) -> bool:
        return self.publish(updated_event(
            kind, entry.tournament_id, entry.id, entry.display_name, sorted(changed)
        ))

    def removed(self, kind: str, tournament_id: str, entry_id: str, name: str) -> bool:
        return self.publish(removed_event(kind, tournament_id, entry_id, name))

    def failed(self, kind: str, tournament_id: str, name: str, reason: str) -> bool:
        logger.error(f"Failed to register {kind} \"{name}\" for {tournament_id}: {reason}")
        return self.publish(registration_failed_event(kind, tournament_id, name, reason))

    def batch_completed(self, tournament_id: str, country: str, registered: int, attempted: int) -> bool:
        return self.publish(batch_completed_event(tournament_id, country, registered, attempted))

    def status_changed(self, kind: str, tournament_id: str, from_status: str, to_status: str, count: int) -> bool:
        return self.publish(status_changed_event(kind, tournament_id, from_status, to_status, count))
