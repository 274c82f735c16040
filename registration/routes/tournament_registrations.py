from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from shared.errors import BadRequestError, NotFoundError, RegistrationError
from shared.registration_status import parse_status
from registration.batch_registration import display_name_for
from registration.requests import (
    BatchRegistrationRequest,
    CreateChoreographyRequest,
    CreateCoachRequest,
    CreateJudgeRequest,
    CreateSupportRequest,
    StatusTransitionRequest,
    StatusUpdateRequest,
    parse_choreography_changes,
    parse_person_changes,
    parse_support_changes,
)

bp = Blueprint('tournament_registrations', __name__,
               url_prefix='/api/v1/tournaments/<tournament_id>/registrations')

KINDS = 'any(choreographies, coaches, judges, support)'

REQUEST_TYPES = {
    'choreographies': CreateChoreographyRequest,
    'coaches': CreateCoachRequest,
    'judges': CreateJudgeRequest,
    'support': CreateSupportRequest,
}

SINGULAR = {
    'choreographies': 'choreography',
    'coaches': 'coach',
    'judges': 'judge',
    'support': 'support',
}


def get_service(kind: str):
    return current_app.registration_services[kind]


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequestError("Request body must be JSON")
    return data


def get_entry(kind: str, tournament_id: str, entry_id: str):
    """Load an entry and make sure it belongs to the tournament in the URL."""
    service = get_service(kind)
    entry = service.find_one(entry_id)
    if entry.tournament_id != tournament_id:
        raise NotFoundError(service.entity_name, entry_id)
    return entry


def parse_changes(kind: str, data: dict) -> dict:
    if kind == 'choreographies':
        return parse_choreography_changes(data)
    if kind == 'support':
        changes = parse_support_changes(data)
    else:
        changes = parse_person_changes(data, get_service(kind).extra_fields)
    changes.pop('tournament_id', None)
    return changes


def required_status(value: str):
    status = parse_status(value)
    if status is None:
        raise BadRequestError(f"Invalid registration status: {value}")
    return status


# ==================== Registrations ====================

@bp.route(f'/<{KINDS}:kind>', methods=['POST'])
def register(tournament_id, kind):
    """Register one entry or a list of entries of a single kind."""
    current_app.tournament_store.get(tournament_id)
    data = get_json_body()
    items = data if isinstance(data, list) else [data]

    service = get_service(kind)
    request_type = REQUEST_TYPES[kind]
    results = []
    errors = []
    for item in items:
        try:
            if not isinstance(item, dict):
                raise BadRequestError("Each registration must be a JSON object")
            payload = dict(item, tournamentId=tournament_id)
            entry = service.create(request_type.from_dict(payload))
            results.append(entry.to_dict())
        except (RegistrationError, SQLAlchemyError) as e:
            errors.append(
                f"Failed to register {SINGULAR[kind]} \"{display_name_for(SINGULAR[kind], item)}\": "
                f"{getattr(e, 'message', str(e))}"
            )

    response = {'success': not errors, 'results': results}
    if errors:
        response['errors'] = errors
        return jsonify(response), 207 if results else 400
    return jsonify(response), 201


@bp.route(f'/<{KINDS}:kind>', methods=['GET'])
def list_registrations(tournament_id, kind):
    filters = {'country': request.args.get('country'), 'tournament_id': tournament_id}
    if kind == 'support':
        filters['role'] = request.args.get('role')
    entries = get_service(kind).find_all(**filters)
    return jsonify([e.to_dict() for e in entries])


@bp.route(f'/<{KINDS}:kind>/<entry_id>', methods=['PUT'])
def update_registration(tournament_id, kind, entry_id):
    get_entry(kind, tournament_id, entry_id)
    changes = parse_changes(kind, get_json_body())
    entry = get_service(kind).update(entry_id, changes)
    return jsonify(entry.to_dict())


@bp.route(f'/<{KINDS}:kind>/<entry_id>', methods=['DELETE'])
def remove_registration(tournament_id, kind, entry_id):
    get_entry(kind, tournament_id, entry_id)
    get_service(kind).remove(entry_id)
    return jsonify({'success': True})


# ==================== Batch & Summaries ====================

@bp.route('/batch', methods=['POST'])
def register_batch(tournament_id):
    data = get_json_body()
    if isinstance(data, dict):
        tournament = data.setdefault('tournament', {'id': tournament_id})
        if isinstance(tournament, dict):
            tournament.setdefault('id', tournament_id)
            if tournament['id'] != tournament_id:
                raise BadRequestError("Batch tournament does not match the tournament in the URL")
    batch = BatchRegistrationRequest.from_dict(data)
    current_app.tournament_store.get(tournament_id)

    result = current_app.batch_service.process_batch(batch)
    return jsonify(result), 201 if result['success'] else 207


@bp.route('/summary', methods=['GET'])
def registration_summary(tournament_id):
    country = request.args.get('country')
    if not country:
        raise BadRequestError("country query parameter is required")
    current_app.tournament_store.get(tournament_id)
    return jsonify(current_app.batch_service.get_registration_summary(country, tournament_id))


@bp.route('/stats', methods=['GET'])
def registration_stats(tournament_id):
    current_app.tournament_store.get(tournament_id)
    return jsonify(current_app.batch_service.get_tournament_stats(tournament_id))


# ==================== Status lifecycle ====================

@bp.route(f'/<{KINDS}:kind>/status/<status>', methods=['GET'])
def list_by_status(tournament_id, kind, status):
    entries = get_service(kind).find_by_status(
        required_status(status),
        country=request.args.get('country'),
        tournament_id=tournament_id
    )
    return jsonify([e.to_dict() for e in entries])


@bp.route(f'/<{KINDS}:kind>/<entry_id>/status', methods=['PATCH'])
def update_entry_status(tournament_id, kind, entry_id):
    update = StatusUpdateRequest.from_dict(get_json_body())
    get_entry(kind, tournament_id, entry_id)
    success = get_service(kind).update_status(entry_id, update.status, update.notes)
    return jsonify({'success': success}), 200 if success else 500


@bp.route(f'/<{KINDS}:kind>/status', methods=['PATCH'])
def update_statuses(tournament_id, kind):
    update = StatusUpdateRequest.from_dict(get_json_body(), require_ids=True)
    result = get_service(kind).update_status_for_ids(
        update.registration_ids, update.status, update.notes, tournament_id=tournament_id
    )
    return jsonify(result)


@bp.route(f'/<{KINDS}:kind>/status/transition', methods=['POST'])
def transition_statuses(tournament_id, kind):
    transition = StatusTransitionRequest.from_dict(get_json_body())
    current_app.tournament_store.get(tournament_id)
    updated = get_service(kind).update_status_batch(
        transition.from_status,
        transition.to_status,
        country=transition.country,
        tournament_id=tournament_id,
        notes=transition.notes
    )
    return jsonify({'success': True, 'updated': updated})
