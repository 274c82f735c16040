import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from shared.errors import NotFoundError
from shared.registration_status import RegistrationStatus
from .models import db
from .notifier import RegistrationNotifier

logger = logging.getLogger(__name__)


class StatusTrackedService:
    """
    Base for services whose rows carry a RegistrationStatus.

    Any status may be set from any other; use
    shared.registration_status.is_forward_transition to restrict callers.
    """

    model = None
    kind: str = None
    entity_name: str = None

    def __init__(self, notifier: Optional[RegistrationNotifier] = None):
        self.notifier = notifier or RegistrationNotifier(publish=False)

    def find_one(self, entry_id: str):
        entry = db.session.get(self.model, entry_id)
        if not entry:
            raise NotFoundError(self.entity_name, entry_id)
        return entry

    def _scoped_query(self, country: str = None, tournament_id: str = None):
        query = self.model.query
        if country:
            query = query.filter(self.model.country == country.upper())
        if tournament_id:
            query = query.filter(self.model.tournament_id == tournament_id)
        return query

    def find_by_status(
        self,
        status: RegistrationStatus,
        country: str = None,
        tournament_id: str = None
    ) -> List:
        query = self._scoped_query(country, tournament_id).filter(self.model.status == status.value)
        return query.order_by(self.model.created_at.desc()).all()

    def update_status(self, entry_id: str, status: RegistrationStatus, notes: str = None) -> bool:
        """Set one entry's status. Returns False instead of raising."""
        try:
            entry = db.session.get(self.model, entry_id)
            if not entry:
                return False
            entry.status = status.value
            if notes is not None:
                entry.notes = notes
            db.session.commit()
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to update {self.kind} {entry_id} status to {status.value}: {e}")
            return False

    def update_status_batch(
        self,
        from_status: RegistrationStatus,
        to_status: RegistrationStatus,
        country: str = None,
        tournament_id: str = None,
        notes: str = None
    ) -> int:
        """Move every matching entry from one status to another in a single commit."""
        entries = self.find_by_status(from_status, country, tournament_id)
        if not entries:
            return 0

        for entry in entries:
            entry.status = to_status.value
            if notes is not None:
                entry.notes = notes
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        logger.info(
            f"Moved {len(entries)} {self.kind} registrations from {from_status.value} to {to_status.value}"
        )
        self.notifier.status_changed(
            self.kind, tournament_id or '*', from_status.value, to_status.value, len(entries)
        )
        return len(entries)

    def update_status_for_ids(
        self,
        entry_ids: List[str],
        status: RegistrationStatus,
        notes: str = None,
        tournament_id: str = None
    ) -> dict:
        """Update each id independently; ids outside `tournament_id` are reported, not touched."""
        errors = []
        updated = 0
        for entry_id in entry_ids:
            if tournament_id:
                entry = db.session.get(self.model, entry_id)
                if entry is not None and entry.tournament_id != tournament_id:
                    errors.append(f"{self.entity_name} {entry_id} does not belong to tournament {tournament_id}")
                    continue
            if self.update_status(entry_id, status, notes):
                updated += 1
            else:
                errors.append(f"Failed to update status for {self.kind} {entry_id}")

        result = {'success': not errors, 'updated': updated}
        if errors:
            result['errors'] = errors
        return result
