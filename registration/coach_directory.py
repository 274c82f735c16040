import logging
from typing import List, Optional

from sqlalchemy import or_

from shared.errors import BadRequestError
from .models import db, Coach, LocalCoach
from .requests import CreateLocalCoachRequest

logger = logging.getLogger(__name__)


class CoachDirectory:
    """Coach profiles created locally for coaches missing from the FIG registry."""

    def create_local(self, request: CreateLocalCoachRequest) -> LocalCoach:
        if self.find_by_fig_id(request.fig_id) or Coach.query.filter_by(fig_id=request.fig_id).first():
            raise BadRequestError(f"Coach with FIG ID {request.fig_id} already exists")

        coach = LocalCoach(**vars(request))
        db.session.add(coach)
        db.session.commit()
        logger.info(f"Created local coach: {coach.full_name} ({coach.fig_id})")
        return coach

    def find_by_fig_id(self, fig_id: str) -> Optional[LocalCoach]:
        return LocalCoach.query.filter_by(fig_id=fig_id).first()

    def find_all(self, country: str = None, query: str = None) -> List[LocalCoach]:
        coaches = LocalCoach.query
        if country:
            coaches = coaches.filter(LocalCoach.country == country.upper())
        if query:
            pattern = f"%{query}%"
            coaches = coaches.filter(or_(
                LocalCoach.first_name.ilike(pattern),
                LocalCoach.last_name.ilike(pattern),
                LocalCoach.full_name.ilike(pattern),
            ))
        return coaches.order_by(LocalCoach.last_name).all()
