"""
Unit tests for registration events.
"""
import json

from shared.events import (
    Event,
    EventType,
    batch_completed_event,
    registered_event,
    registration_failed_event,
    removed_event,
    status_changed_event,
    updated_event,
)


class TestEvent:

    def test_timestamp_defaults(self):
        event = Event(type=EventType.BATCH_COMPLETED, tournament_id='t-1')
        assert event.timestamp.endswith('Z')
        assert event.data == {}

    def test_json_restores_type(self):
        event = registered_event('coach', 't-1', 'c-1', 'Maria Lopez', 'USA')
        restored = Event.from_json(event.to_json())
        assert restored.type == EventType.COACH_REGISTERED
        assert restored.data['name'] == 'Maria Lopez'

    def test_unknown_type_kept_as_string(self):
        event = Event.from_dict({'type': 'custom.thing', 'tournament_id': 't-1'})
        assert event.type == 'custom.thing'


class TestEventFactories:

    def test_registered_event_per_kind(self):
        assert registered_event('choreography', 't', 'id', 'n', 'USA').type == EventType.CHOREOGRAPHY_REGISTERED
        assert registered_event('judge', 't', 'id', 'n', 'USA').type == EventType.JUDGE_REGISTERED

    def test_removed_event(self):
        event = removed_event('coach', 't-1', 'c-1', 'Maria Lopez')
        assert event.type == EventType.COACH_REMOVED
        assert event.data == {'id': 'c-1', 'name': 'Maria Lopez'}

    def test_failed_event_carries_reason(self):
        event = registration_failed_event('choreography', 't-1', 'SMITH', 'quota')
        payload = json.loads(event.to_json())
        assert payload['type'] == 'registration.failed'
        assert payload['data']['reason'] == 'quota'

    def test_batch_and_status_events(self):
        assert batch_completed_event('t-1', 'USA', 2, 3).data['attempted'] == 3
        event = status_changed_event('judge', 't-1', 'PENDING', 'SUBMITTED', 4)
        assert event.data['count'] == 4
        assert event.data['to_status'] == 'SUBMITTED'

    def test_updated_event_lists_changed_fields(self):
        event = updated_event('support', 't-1', 's-1', 'Elena Vargas', ['email', 'role'])
        assert event.type == EventType.SUPPORT_UPDATED
        assert event.data == {'id': 's-1', 'name': 'Elena Vargas', 'changed': ['email', 'role']}
        assert updated_event('choreography', 't-1', 'c-1', 'SMITH', []).type == EventType.CHOREOGRAPHY_UPDATED

    def test_support_registered_and_removed(self):
        assert registered_event('support', 't', 'id', 'n', 'USA').type == EventType.SUPPORT_REGISTERED
        assert removed_event('support', 't', 'id', 'n').type == EventType.SUPPORT_REMOVED
