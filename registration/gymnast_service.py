import logging
from typing import List, Optional

from shared.errors import BadRequestError, NotFoundError
from .fig_api import FigApiClient, GymnastView
from .models import db, Gymnast
from .requests import CreateLocalGymnastRequest

logger = logging.getLogger(__name__)


class GymnastService:
    """Resolves gymnasts against the FIG registry first, then local rows."""

    def __init__(self, registry: FigApiClient):
        self.registry = registry

    def find_by_fig_id(self, fig_id: str) -> Optional[GymnastView]:
        gymnast = self.registry.get_gymnast_by_fig_id(fig_id)
        if gymnast:
            return gymnast

        row = Gymnast.query.filter_by(fig_id=fig_id).first()
        return GymnastView.from_model(row) if row else None

    def find_all(self, country: str = None) -> List[GymnastView]:
        if country:
            registry_gymnasts = self.registry.get_gymnasts_by_country(country)
        else:
            registry_gymnasts = self.registry.get_gymnasts()

        # Registry entries win over local rows with the same fig id
        known = {g.fig_id for g in registry_gymnasts}
        local = [g for g in self._local_gymnasts(country) if g.fig_id not in known]
        return registry_gymnasts + local

    def _local_gymnasts(self, country: str = None) -> List[GymnastView]:
        query = Gymnast.query.filter_by(is_local=True)
        if country:
            query = query.filter(db.func.upper(Gymnast.country) == country.upper())
        return [GymnastView.from_model(g) for g in query.order_by(Gymnast.last_name).all()]

    def create_local(self, request: CreateLocalGymnastRequest) -> Gymnast:
        if self.find_by_fig_id(request.fig_id):
            raise BadRequestError(f"Gymnast with FIG ID {request.fig_id} already exists")

        gymnast = Gymnast(
            fig_id=request.fig_id,
            first_name=request.first_name,
            last_name=request.last_name,
            full_name=f"{request.first_name} {request.last_name}",
            gender=request.gender,
            country=request.country,
            date_of_birth=request.date_of_birth,
            discipline='AER',
            license_valid=True,
            license_expiry_date=None,
            is_local=True
        )
        db.session.add(gymnast)
        db.session.commit()
        logger.info(f"Created local gymnast: {gymnast.full_name} ({gymnast.fig_id}), category {gymnast.category}")
        return gymnast

    def _get_local(self, gymnast_id: str, action: str) -> Gymnast:
        gymnast = db.session.get(Gymnast, gymnast_id)
        if not gymnast:
            raise NotFoundError('Gymnast', gymnast_id)
        if not gymnast.is_local:
            raise BadRequestError(f"Cannot {action} FIG registry gymnasts")
        return gymnast

    def update_local(self, gymnast_id: str, changes: dict) -> Gymnast:
        gymnast = self._get_local(gymnast_id, 'update')
        for attr, value in changes.items():
            setattr(gymnast, attr, value)
        if 'first_name' in changes or 'last_name' in changes:
            gymnast.full_name = f"{gymnast.first_name} {gymnast.last_name}"
        db.session.commit()
        logger.info(f"Updated local gymnast: {gymnast.full_name} ({gymnast.fig_id})")
        return gymnast

    def remove_local(self, gymnast_id: str):
        gymnast = self._get_local(gymnast_id, 'delete')
        if gymnast.choreographies:
            raise BadRequestError(
                f"Gymnast {gymnast.fig_id} is part of {len(gymnast.choreographies)} choreographies"
            )
        db.session.delete(gymnast)
        db.session.commit()
        logger.info(f"Deleted local gymnast: {gymnast.full_name} ({gymnast.fig_id})")
