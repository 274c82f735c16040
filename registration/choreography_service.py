"""
Choreography registration pipeline.

A create runs, in order: identifier checks, tournament lookup, the
tournament kind's quota/eligibility rules, type/count consistency, gymnast
resolution and licence checks, gymnast upsert, and a single commit. Any
failure before the commit leaves the database untouched.
"""
import logging
import re
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from shared.errors import BadRequestError, NotFoundError
from .business_rules import BusinessRulesResolver, RuleCheckRequest
from .categories import (
    ChoreographyCategory,
    ChoreographyType,
    generate_choreography_name,
    mandated_gymnast_count,
    parse_category,
    parse_type,
)
from .fig_api import GymnastView
from .gymnast_service import GymnastService
from .models import db, Choreography, Gymnast
from .notifier import RegistrationNotifier
from .requests import CreateChoreographyRequest
from .status_lifecycle import StatusTrackedService
from .tournament_store import TournamentStore

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE
)


def validate_fig_ids(fig_ids: List[str]):
    """Reject empty, repeated, or UUID-shaped gymnast ids."""
    seen = set()
    for fig_id in fig_ids:
        if not fig_id or not fig_id.strip():
            raise BadRequestError("Gymnast FIG IDs must not be empty")
        if UUID_PATTERN.match(fig_id):
            raise BadRequestError(
                f"Invalid FIG ID {fig_id}: looks like an internal database ID, not a FIG ID"
            )
        if fig_id in seen:
            raise BadRequestError(f"Duplicate gymnast FIG ID {fig_id} in choreography")
        seen.add(fig_id)


def validate_type_count(choreography_type: ChoreographyType, gymnast_count: int, id_count: int):
    expected = mandated_gymnast_count(choreography_type)
    if gymnast_count != expected:
        raise BadRequestError(
            f"Invalid gymnast count {gymnast_count} for choreography type {choreography_type.value} "
            f"(requires {expected})"
        )
    if id_count != gymnast_count:
        raise BadRequestError(
            f"Gymnast count {gymnast_count} does not match the {id_count} gymnast FIG IDs provided"
        )


class ChoreographyService(StatusTrackedService):
    model = Choreography
    kind = 'choreography'
    entity_name = 'Choreography'

    def __init__(
        self,
        gymnasts: GymnastService,
        tournaments: TournamentStore = None,
        rules: BusinessRulesResolver = None,
        notifier: Optional[RegistrationNotifier] = None
    ):
        super().__init__(notifier)
        self.gymnasts = gymnasts
        self.tournaments = tournaments or TournamentStore()
        self.rules = rules or BusinessRulesResolver()

    # ==================== Pipeline steps ====================

    def count_existing(
        self,
        country: str,
        category: ChoreographyCategory,
        tournament_id: str,
        exclude_id: str = None
    ) -> int:
        query = Choreography.query.filter_by(
            country=country.upper(),
            category=category.value,
            tournament_id=tournament_id
        )
        if exclude_id:
            query = query.filter(Choreography.id != exclude_id)
        return query.count()

    def _check_rules(self, tournament, country, category, choreography_type, gymnast_count,
                     fig_ids, exclude_id=None):
        existing = self.count_existing(country, category, tournament.id, exclude_id)
        strategy = self.rules.get_strategy(tournament.type)
        strategy.validate(
            RuleCheckRequest(
                country=country,
                category=category,
                type=choreography_type,
                gymnast_count=gymnast_count,
                gymnast_fig_ids=fig_ids,
                tournament_id=tournament.id
            ),
            existing
        )
        validate_type_count(choreography_type, gymnast_count, len(fig_ids))

    def _resolve_gymnasts(self, fig_ids: List[str]) -> List[GymnastView]:
        resolved = []
        for fig_id in fig_ids:
            gymnast = self.gymnasts.find_by_fig_id(fig_id)
            if not gymnast:
                raise NotFoundError('Gymnast', fig_id, f"Gymnast with FIG ID {fig_id} not found")
            if not gymnast.is_local and not gymnast.is_licensed:
                raise BadRequestError(f"Gymnast {gymnast.full_name} ({fig_id}) does not have a valid FIG license")
            resolved.append(gymnast)
        return resolved

    def _upsert_gymnasts(self, views: List[GymnastView]) -> List[Gymnast]:
        rows = []
        for view in views:
            row = Gymnast.query.filter_by(fig_id=view.fig_id).first()
            if row is None:
                row = Gymnast(fig_id=view.fig_id)
                db.session.add(row)
            row.first_name = view.first_name
            row.last_name = view.last_name
            row.full_name = view.full_name
            row.gender = view.gender
            row.country = view.country
            row.date_of_birth = view.date_of_birth
            row.discipline = view.discipline
            row.license_valid = view.is_licensed
            row.is_local = view.is_local
            rows.append(row)
        return rows

    # ==================== Operations ====================

    def create(self, request: CreateChoreographyRequest) -> Choreography:
        validate_fig_ids(request.gymnast_fig_ids)
        tournament = self.tournaments.get(request.tournament_id)

        country = request.country.upper()
        gymnast_count = request.gymnast_count
        if gymnast_count is None:
            gymnast_count = mandated_gymnast_count(request.type)

        self._check_rules(
            tournament, country, request.category, request.type,
            gymnast_count, request.gymnast_fig_ids
        )
        views = self._resolve_gymnasts(request.gymnast_fig_ids)

        try:
            gymnasts = self._upsert_gymnasts(views)
            choreography = Choreography(
                name=request.name or generate_choreography_name(g.last_name for g in views),
                country=country,
                category=request.category.value,
                type=request.type.value,
                gymnast_count=gymnast_count,
                oldest_gymnast_age=request.oldest_gymnast_age,
                notes=request.notes,
                tournament=tournament,
                gymnasts=gymnasts
            )
            db.session.add(choreography)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        logger.info(f"Created choreography: {choreography.name} for country: {country}")
        self.notifier.registered(self.kind, choreography)
        return self.find_one(choreography.id)

    def find_all(
        self,
        country: str = None,
        tournament_id: str = None,
        category: str = None,
        choreography_type: str = None
    ) -> List[Choreography]:
        query = self._scoped_query(country, tournament_id)
        if category:
            parsed = parse_category(category)
            if parsed is None:
                raise BadRequestError(f"Unknown category {category}")
            query = query.filter(Choreography.category == parsed.value)
        if choreography_type:
            parsed = parse_type(choreography_type)
            if parsed is None:
                raise BadRequestError(f"Unknown choreography type {choreography_type}")
            query = query.filter(Choreography.type == parsed.value)
        return query.order_by(Choreography.created_at.desc()).all()

    def update(self, choreography_id: str, changes: dict) -> Choreography:
        choreography = self.find_one(choreography_id)
        changes = dict(changes)
        fig_ids = changes.pop('gymnast_fig_ids', None)

        country = changes.get('country', choreography.country)
        category = changes.get('category') or parse_category(choreography.category)
        choreography_type = changes.get('type') or parse_type(choreography.type)
        gymnast_count = changes.get('gymnast_count', choreography.gymnast_count)

        views = None
        if fig_ids is not None:
            validate_fig_ids(fig_ids)
            self._check_rules(
                choreography.tournament, country, category, choreography_type,
                gymnast_count, fig_ids, exclude_id=choreography.id
            )
            views = self._resolve_gymnasts(fig_ids)
        elif 'type' in changes or 'gymnast_count' in changes:
            validate_type_count(choreography_type, gymnast_count, len(choreography.gymnasts))

        try:
            if views is not None:
                choreography.gymnasts = self._upsert_gymnasts(views)
            for attr, value in changes.items():
                setattr(choreography, attr, getattr(value, 'value', value))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        logger.info(f"Updated choreography: {choreography.name}")
        changed = list(changes) + (['gymnasts'] if views is not None else [])
        self.notifier.updated(self.kind, choreography, changed)
        return choreography

    def remove(self, choreography_id: str):
        choreography = self.find_one(choreography_id)
        name, tournament_id = choreography.name, choreography.tournament_id
        db.session.delete(choreography)
        db.session.commit()
        logger.info(f"Deleted choreography: {name}")
        self.notifier.removed(self.kind, tournament_id, choreography_id, name)

    def get_country_stats(self, country: str) -> dict:
        choreographies = self.find_all(country=country)
        by_category = {c.value: 0 for c in ChoreographyCategory}
        for choreography in choreographies:
            by_category[choreography.category] = by_category.get(choreography.category, 0) + 1
        return {
            'totalChoreographies': len(choreographies),
            'byCategory': by_category,
        }
