"""
Batch registration.

Processes choreographies, then coaches, then judges, one item at a time.
A failing item is recorded in `errors` and processing moves on; items that
succeeded before or after it stay committed.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from shared.errors import RegistrationError
from .choreography_service import ChoreographyService
from .coach_registration import CoachRegistrationService
from .judge_registration import JudgeRegistrationService
from .notifier import RegistrationNotifier
from .requests import (
    BatchRegistrationRequest,
    CreateChoreographyRequest,
    CreateCoachRequest,
    CreateJudgeRequest,
)
from .tournament_store import TournamentStore

logger = logging.getLogger(__name__)


def display_name_for(kind: str, item) -> str:
    if not isinstance(item, dict):
        return f"unnamed {kind}"
    if kind == 'choreography':
        return item.get('name') or 'unnamed choreography'
    full_name = item.get('fullName')
    if full_name:
        return full_name
    parts = [item.get('firstName'), item.get('lastName')]
    return ' '.join(p for p in parts if p) or f"unnamed {kind}"


class BatchRegistrationService:

    def __init__(
        self,
        choreographies: ChoreographyService,
        coaches: CoachRegistrationService,
        judges: JudgeRegistrationService,
        tournaments: TournamentStore = None,
        notifier: Optional[RegistrationNotifier] = None
    ):
        self.choreographies = choreographies
        self.coaches = coaches
        self.judges = judges
        self.tournaments = tournaments or TournamentStore()
        self.notifier = notifier or RegistrationNotifier(publish=False)

    def _register_items(
        self,
        kind: str,
        items: List[dict],
        build: Callable[[dict], object],
        create: Callable,
        batch: BatchRegistrationRequest,
        results: list,
        errors: list
    ):
        if items:
            logger.info(f"Processing {len(items)} {kind} registrations")
        for item in items:
            name = display_name_for(kind, item)
            try:
                if not isinstance(item, dict):
                    raise RegistrationError(f"{kind} entry must be an object")
                payload = dict(item)
                payload['tournamentId'] = batch.tournament_id
                if not payload.get('country'):
                    payload['country'] = batch.country
                entry = create(build(payload))
                results.append(entry.to_dict())
                logger.info(f"Successfully registered {kind}: {entry.display_name}")
            except (RegistrationError, SQLAlchemyError) as e:
                reason = getattr(e, 'message', str(e))
                message = f'Failed to register {kind} "{name}": {reason}'
                errors.append(message)
                self.notifier.failed(kind, batch.tournament_id, name, reason)

    def process_batch(self, batch: BatchRegistrationRequest) -> dict:
        results = {'choreographies': [], 'coaches': [], 'judges': []}
        errors: List[str] = []

        logger.info(
            f"Processing batch registration for country: {batch.country}, "
            f"tournament: {batch.tournament.get('name', batch.tournament_id)}"
        )

        self._register_items(
            'choreography', batch.choreographies, CreateChoreographyRequest.from_dict,
            self.choreographies.create, batch, results['choreographies'], errors
        )
        self._register_items(
            'coach', batch.coaches, CreateCoachRequest.from_dict,
            self.coaches.create, batch, results['coaches'], errors
        )
        self._register_items(
            'judge', batch.judges, CreateJudgeRequest.from_dict,
            self.judges.create, batch, results['judges'], errors
        )

        registered = sum(len(r) for r in results.values())
        logger.info(f"Batch registration completed: {registered}/{batch.total_items} successful registrations")
        self.notifier.batch_completed(batch.tournament_id, batch.country, registered, batch.total_items)

        response = {'success': not errors, 'results': results}
        if errors:
            response['errors'] = errors
        return response

    def get_existing_registrations(self, country: str, tournament_id: str) -> dict:
        choreographies = self.choreographies.find_all(country=country, tournament_id=tournament_id)
        coaches = self.coaches.find_all(country=country, tournament_id=tournament_id)
        judges = self.judges.find_all(country=country, tournament_id=tournament_id)
        return {
            'choreographies': [c.to_dict() for c in choreographies],
            'coaches': [c.to_dict() for c in coaches],
            'judges': [j.to_dict() for j in judges],
            'totals': {
                'choreographies': len(choreographies),
                'coaches': len(coaches),
                'judges': len(judges),
                'total': len(choreographies) + len(coaches) + len(judges),
            },
        }

    def get_registration_summary(self, country: str, tournament_id: str) -> dict:
        summary = self.get_existing_registrations(country, tournament_id)
        summary['summary'] = {
            'country': country.upper(),
            'tournamentId': tournament_id,
            'lastUpdated': datetime.utcnow().isoformat() + 'Z',
            'registrationStatus': 'IN_PROGRESS',
        }
        return summary

    def get_tournament_stats(self, tournament_id: str) -> dict:
        choreographies = len(self.choreographies.find_all(tournament_id=tournament_id))
        coaches = len(self.coaches.find_all(tournament_id=tournament_id))
        judges = len(self.judges.find_all(tournament_id=tournament_id))
        return {
            'choreographies': choreographies,
            'coaches': coaches,
            'judges': judges,
            'total': choreographies + coaches + judges,
        }

    def get_global_summary(self, country: str = None) -> dict:
        """Registration counts for every tournament, optionally for one country."""
        tournaments = []
        totals = {'choreographies': 0, 'coaches': 0, 'judges': 0, 'total': 0}
        for tournament in self.tournaments.list():
            counts = {
                'choreographies': len(self.choreographies.find_all(country=country, tournament_id=tournament.id)),
                'coaches': len(self.coaches.find_all(country=country, tournament_id=tournament.id)),
                'judges': len(self.judges.find_all(country=country, tournament_id=tournament.id)),
            }
            counts['total'] = sum(counts.values())
            for key, value in counts.items():
                totals[key] += value
            tournaments.append({'tournament': tournament.to_summary(), **counts})

        return {
            'country': country.upper() if country else None,
            'tournaments': tournaments,
            'totals': totals,
        }
