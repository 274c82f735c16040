import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from shared.errors import BadRequestError
from .models import db
from .notifier import RegistrationNotifier
from .status_lifecycle import StatusTrackedService
from .tournament_store import TournamentStore

logger = logging.getLogger(__name__)


class PersonRegistrationService(StatusTrackedService):
    """
    Shared pipeline for registering one person (coach, judge or support
    staff) for a tournament.

    Subclasses set `model`, `kind`, `entity_name`, `role` and
    `extra_fields` (camelCase request key -> model attribute for the
    role-specific columns). When `unique_fig_id` is set, a fig id may be
    registered only once per tournament.
    """

    role: str = None
    extra_fields: Dict[str, str] = {}
    unique_fig_id = True

    def __init__(self, tournaments: TournamentStore = None, notifier: Optional[RegistrationNotifier] = None):
        super().__init__(notifier)
        self.tournaments = tournaments or TournamentStore()

    def _duplicate_error(self, fig_id: str) -> BadRequestError:
        return BadRequestError(f"{self.role} {fig_id} is already registered for this tournament")

    def _find_duplicate(self, fig_id: str, tournament_id: str, exclude_id: str = None):
        if not self.unique_fig_id:
            return None
        query = self.model.query.filter_by(fig_id=fig_id, tournament_id=tournament_id)
        if exclude_id:
            query = query.filter(self.model.id != exclude_id)
        return query.first()

    def create(self, request):
        tournament = self.tournaments.get(request.tournament_id)

        fig_id = getattr(request, 'fig_id', None)
        if self._find_duplicate(fig_id, tournament.id):
            raise self._duplicate_error(fig_id)

        entry = self.model(**vars(request))
        entry.tournament = tournament
        db.session.add(entry)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            # Lost a race against a concurrent registration of the same pair
            if self._find_duplicate(fig_id, tournament.id):
                raise self._duplicate_error(fig_id)
            raise
        except SQLAlchemyError:
            db.session.rollback()
            raise

        logger.info(f"Registered {self.kind} {entry.display_name} for {tournament.name}")
        self.notifier.registered(self.kind, entry)
        return entry

    def find_all(self, country: str = None, tournament_id: str = None) -> List:
        return self._scoped_query(country, tournament_id).order_by(self.model.created_at.desc()).all()

    def update(self, entry_id: str, changes: dict):
        entry = self.find_one(entry_id)

        tournament_id = changes.get('tournament_id') or entry.tournament_id
        fig_id = changes.get('fig_id') or getattr(entry, 'fig_id', None)
        if self._find_duplicate(fig_id, tournament_id, exclude_id=entry.id):
            raise self._duplicate_error(fig_id)
        if tournament_id != entry.tournament_id:
            entry.tournament = self.tournaments.get(tournament_id)

        for attr, value in changes.items():
            if attr != 'tournament_id':
                setattr(entry, attr, value)
        if ('first_name' in changes or 'last_name' in changes) and 'full_name' not in changes:
            entry.full_name = f"{entry.first_name} {entry.last_name}"

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            if self._find_duplicate(fig_id, tournament_id, exclude_id=entry_id):
                raise self._duplicate_error(fig_id)
            raise

        logger.info(f"Updated {self.kind} {entry.display_name}")
        self.notifier.updated(self.kind, entry, changes)
        return entry

    def remove(self, entry_id: str):
        entry = self.find_one(entry_id)
        name, tournament_id = entry.full_name, entry.tournament_id
        db.session.delete(entry)
        db.session.commit()
        logger.info(f"Removed {self.kind} {name} from tournament {tournament_id}")
        self.notifier.removed(self.kind, tournament_id, entry_id, name)

    def _count_by_tournament(self, entries) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for entry in entries:
            name = entry.tournament.name
            counts[name] = counts.get(name, 0) + 1
        return counts
