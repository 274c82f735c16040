from typing import List, Optional

from shared.errors import NotFoundError
from .models import Tournament


class TournamentStore:
    """Read access to tournaments. Registration never mutates them."""

    def find_by_id(self, tournament_id: str) -> Optional[Tournament]:
        if not tournament_id:
            return None
        return Tournament.query.filter_by(id=tournament_id).first()

    def get(self, tournament_id: str) -> Tournament:
        tournament = self.find_by_id(tournament_id)
        if not tournament:
            raise NotFoundError('Tournament', tournament_id)
        return tournament

    def list(self, active_only: bool = False, tournament_type: str = None) -> List[Tournament]:
        """List tournaments, newest start date first."""
        query = Tournament.query
        if active_only:
            query = query.filter_by(is_active=True)
        if tournament_type:
            query = query.filter_by(type=tournament_type)
        return query.order_by(Tournament.start_date.desc()).all()

    def get_stats(self, tournament_id: str) -> dict:
        tournament = self.get(tournament_id)

        by_category = {}
        by_type = {}
        countries = set()
        for choreography in tournament.choreographies:
            by_category[choreography.category] = by_category.get(choreography.category, 0) + 1
            by_type[choreography.type] = by_type.get(choreography.type, 0) + 1
            countries.add(choreography.country)

        return {
            'totalChoreographies': len(tournament.choreographies),
            'choreographiesByCategory': by_category,
            'choreographiesByType': by_type,
            'countriesParticipating': sorted(countries),
        }
