import logging
import os

from flask import Flask, request, jsonify
from flask_migrate import Migrate
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shared.errors import ConfigurationError, RegistrationError
from .business_rules import BusinessRulesResolver
from .batch_registration import BatchRegistrationService
from .choreography_service import ChoreographyService
from .coach_directory import CoachDirectory
from .coach_registration import CoachRegistrationService
from .config import config
from .fig_api import FigApiClient
from .gymnast_service import GymnastService
from .judge_registration import JudgeRegistrationService
from .models import db
from .notifier import RegistrationNotifier
from .requests import (
    CreateChoreographyRequest,
    CreateLocalCoachRequest,
    CreateLocalGymnastRequest,
    parse_choreography_changes,
    parse_gymnast_changes,
)
from .support_registration import SupportRegistrationService
from .tournament_store import TournamentStore

logger = logging.getLogger(__name__)

migrate = Migrate()


def create_app(config_name: str = None) -> Flask:
    """Application factory for the registration service."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize services
    notifier = RegistrationNotifier.from_url(app.config.get('REDIS_URL'), app.config.get('PUBLISH_EVENTS', True))
    tournaments = TournamentStore()
    rules = BusinessRulesResolver()
    gymnasts = GymnastService(FigApiClient.from_config(app.config))
    choreographies = ChoreographyService(gymnasts, tournaments, rules, notifier)
    coaches = CoachRegistrationService(tournaments, notifier)
    judges = JudgeRegistrationService(tournaments, notifier)
    support = SupportRegistrationService(tournaments, notifier)

    # Store services on app for access in routes
    app.tournament_store = tournaments
    app.business_rules = rules
    app.gymnast_service = gymnasts
    app.choreography_service = choreographies
    app.coach_directory = CoachDirectory()
    app.batch_service = BatchRegistrationService(choreographies, coaches, judges, tournaments, notifier)
    app.registration_services = {
        'choreographies': choreographies,
        'coaches': coaches,
        'judges': judges,
        'support': support,
    }

    register_error_handlers(app)
    register_api_routes(app)

    from .routes import tournament_registrations
    app.register_blueprint(tournament_registrations.bp)

    return app


def register_error_handlers(app: Flask):

    @app.errorhandler(RegistrationError)
    def handle_registration_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(e):
        logger.error(f"Configuration error: {e}")
        return jsonify({'error': str(e)}), 500

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify({'error': 'Method not allowed'}), 405


def register_api_routes(app: Flask):
    """Register API routes."""

    @app.route('/health')
    def health():
        try:
            db.session.execute(text('SELECT 1'))
            database = 'ok'
        except SQLAlchemyError as e:
            logger.error(f"Health check database failure: {e}")
            database = 'unavailable'
        status = 'healthy' if database == 'ok' else 'degraded'
        return jsonify({'status': status, 'service': 'registration', 'database': database}), \
            200 if status == 'healthy' else 503

    # ==================== Tournaments ====================

    @app.route('/api/v1/tournaments', methods=['GET'])
    def api_list_tournaments():
        """List tournaments, optionally only active ones or one kind."""
        active_only = request.args.get('active', 'false').lower() == 'true'
        tournament_type = request.args.get('type')
        tournaments = app.tournament_store.list(active_only=active_only, tournament_type=tournament_type)
        return jsonify([t.to_dict() for t in tournaments])

    @app.route('/api/v1/tournaments/<tournament_id>', methods=['GET'])
    def api_get_tournament(tournament_id: str):
        return jsonify(app.tournament_store.get(tournament_id).to_dict())

    @app.route('/api/v1/tournaments/<tournament_id>/stats', methods=['GET'])
    def api_tournament_stats(tournament_id: str):
        return jsonify(app.tournament_store.get_stats(tournament_id))

    @app.route('/api/v1/tournaments/<tournament_id>/rules', methods=['GET'])
    def api_tournament_rules(tournament_id: str):
        tournament = app.tournament_store.get(tournament_id)
        return jsonify(app.business_rules.get_strategy(tournament.type).describe())

    # ==================== Choreographies ====================

    @app.route('/api/v1/choreographies', methods=['POST'])
    def api_create_choreography():
        data = request.get_json(silent=True) or {}
        choreography = app.choreography_service.create(CreateChoreographyRequest.from_dict(data))
        return jsonify(choreography.to_dict()), 201

    @app.route('/api/v1/choreographies', methods=['GET'])
    def api_list_choreographies():
        choreographies = app.choreography_service.find_all(
            country=request.args.get('country'),
            tournament_id=request.args.get('tournamentId'),
            category=request.args.get('category'),
            choreography_type=request.args.get('type')
        )
        return jsonify([c.to_dict() for c in choreographies])

    @app.route('/api/v1/choreographies/stats/<country>', methods=['GET'])
    def api_choreography_country_stats(country: str):
        return jsonify(app.choreography_service.get_country_stats(country))

    @app.route('/api/v1/choreographies/<choreography_id>', methods=['GET'])
    def api_get_choreography(choreography_id: str):
        return jsonify(app.choreography_service.find_one(choreography_id).to_dict())

    @app.route('/api/v1/choreographies/<choreography_id>', methods=['PATCH'])
    def api_update_choreography(choreography_id: str):
        changes = parse_choreography_changes(request.get_json(silent=True) or {})
        choreography = app.choreography_service.update(choreography_id, changes)
        return jsonify(choreography.to_dict())

    @app.route('/api/v1/choreographies/<choreography_id>', methods=['DELETE'])
    def api_delete_choreography(choreography_id: str):
        app.choreography_service.remove(choreography_id)
        return '', 204

    # ==================== Gymnasts ====================

    @app.route('/api/v1/gymnasts', methods=['GET'])
    def api_list_gymnasts():
        gymnasts = app.gymnast_service.find_all(country=request.args.get('country'))
        return jsonify([g.to_dict() for g in gymnasts])

    @app.route('/api/v1/gymnasts', methods=['POST'])
    def api_create_gymnast():
        data = request.get_json(silent=True) or {}
        gymnast = app.gymnast_service.create_local(CreateLocalGymnastRequest.from_dict(data))
        return jsonify(gymnast.to_dict()), 201

    @app.route('/api/v1/gymnasts/cache', methods=['DELETE'])
    def api_clear_gymnast_cache():
        app.gymnast_service.registry.clear_cache()
        return jsonify({'success': True})

    @app.route('/api/v1/gymnasts/<fig_id>', methods=['GET'])
    def api_get_gymnast(fig_id: str):
        gymnast = app.gymnast_service.find_by_fig_id(fig_id)
        if not gymnast:
            return jsonify({'error': f'Gymnast with FIG ID {fig_id} not found'}), 404
        return jsonify(gymnast.to_dict())

    @app.route('/api/v1/gymnasts/<gymnast_id>', methods=['PATCH'])
    def api_update_gymnast(gymnast_id: str):
        changes = parse_gymnast_changes(request.get_json(silent=True) or {})
        return jsonify(app.gymnast_service.update_local(gymnast_id, changes).to_dict())

    @app.route('/api/v1/gymnasts/<gymnast_id>', methods=['DELETE'])
    def api_delete_gymnast(gymnast_id: str):
        app.gymnast_service.remove_local(gymnast_id)
        return '', 204

    # ==================== Local coaches ====================

    @app.route('/api/v1/coaches', methods=['GET'])
    def api_list_coaches():
        coaches = app.coach_directory.find_all(
            country=request.args.get('country'),
            query=request.args.get('q')
        )
        return jsonify([c.to_dict() for c in coaches])

    @app.route('/api/v1/coaches', methods=['POST'])
    def api_create_coach():
        data = request.get_json(silent=True) or {}
        coach = app.coach_directory.create_local(CreateLocalCoachRequest.from_dict(data))
        return jsonify(coach.to_dict()), 201

    @app.route('/api/v1/coaches/<fig_id>', methods=['GET'])
    def api_get_coach(fig_id: str):
        coach = app.coach_directory.find_by_fig_id(fig_id)
        if not coach:
            return jsonify({'error': f'Coach with FIG ID {fig_id} not found'}), 404
        return jsonify(coach.to_dict())

    # ==================== Cross-tournament ====================

    @app.route('/api/v1/registrations/summary', methods=['GET'])
    def api_global_summary():
        return jsonify(app.batch_service.get_global_summary(country=request.args.get('country')))
