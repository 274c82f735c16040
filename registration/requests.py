"""
Request payloads accepted at the JSON boundary.

Each payload is parsed from a camelCase dict into a dataclass. Parsing only
checks shape (types, enums, ranges); business rules live in the services.
"""
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from shared.errors import BadRequestError
from shared.registration_status import RegistrationStatus, parse_status
from .categories import (
    ChoreographyCategory,
    ChoreographyType,
    MAX_GYMNASTS,
    VALID_CATEGORIES,
    VALID_CHOREOGRAPHY_TYPES,
    VALID_SUPPORT_ROLES,
    parse_category,
    parse_support_role,
    parse_type,
)

GENDERS = ('MALE', 'FEMALE')
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _require_str(data: dict, key: str, label: str = None) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BadRequestError(f"{label or key} is required")
    return value.strip()


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError(f"{key} must be a string")
    return value.strip() or None


def _int_in_range(data: dict, key: str, low: int, high: int) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadRequestError(f"{key} must be an integer")
    if not low <= value <= high:
        raise BadRequestError(f"{key} must be between {low} and {high}")
    return value


def _category(data: dict) -> ChoreographyCategory:
    category = parse_category(data.get('category'))
    if category is None:
        raise BadRequestError(f"category must be one of: {', '.join(VALID_CATEGORIES)}")
    return category


def _type(data: dict) -> ChoreographyType:
    choreography_type = parse_type(data.get('type'))
    if choreography_type is None:
        raise BadRequestError(f"type must be one of: {', '.join(VALID_CHOREOGRAPHY_TYPES)}")
    return choreography_type


def _fig_id_list(data: dict) -> List[str]:
    ids = data.get('gymnastFigIds')
    if not isinstance(ids, list):
        raise BadRequestError("gymnastFigIds must be a list")
    if len(ids) > MAX_GYMNASTS:
        raise BadRequestError(f"gymnastFigIds accepts at most {MAX_GYMNASTS} entries")
    if any(not isinstance(i, str) for i in ids):
        raise BadRequestError("gymnastFigIds must contain only strings")
    return [i.strip() for i in ids]


def _parse_date(value: str, key: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        raise BadRequestError(f"{key} must be an ISO date (YYYY-MM-DD)")


def _require_dict(data: Any) -> dict:
    if not isinstance(data, dict):
        raise BadRequestError("Request body must be a JSON object")
    return data


def _gender(data: dict) -> str:
    gender = _require_str(data, 'gender').upper()
    if gender not in GENDERS:
        raise BadRequestError(f"gender must be one of: {', '.join(GENDERS)}")
    return gender


def _country_code(data: dict) -> str:
    country = _require_str(data, 'country').upper()
    if not 2 <= len(country) <= 3:
        raise BadRequestError("country must be a 2 or 3 letter code")
    return country


@dataclass
class CreateChoreographyRequest:
    country: str
    category: ChoreographyCategory
    type: ChoreographyType
    gymnast_fig_ids: List[str]
    oldest_gymnast_age: int
    tournament_id: str
    gymnast_count: Optional[int] = None  # derived from the type when omitted
    name: Optional[str] = None  # generated from surnames when omitted
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or 'unnamed choreography'

    @classmethod
    def from_dict(cls, data: dict) -> "CreateChoreographyRequest":
        data = _require_dict(data)
        gymnast_count = None
        if data.get('gymnastCount') is not None:
            gymnast_count = _int_in_range(data, 'gymnastCount', 1, MAX_GYMNASTS)
        return cls(
            name=_optional_str(data, 'name'),
            country=_require_str(data, 'country').upper(),
            category=_category(data),
            type=_type(data),
            gymnast_count=gymnast_count,
            oldest_gymnast_age=_int_in_range(data, 'oldestGymnastAge', 5, 100),
            gymnast_fig_ids=_fig_id_list(data),
            notes=_optional_str(data, 'notes'),
            tournament_id=_require_str(data, 'tournamentId'),
        )


def parse_choreography_changes(data: dict) -> Dict[str, Any]:
    """Validate a partial choreography update; returns snake_case changes."""
    data = _require_dict(data)
    changes: Dict[str, Any] = {}
    if 'name' in data:
        changes['name'] = _require_str(data, 'name')
    if 'country' in data:
        changes['country'] = _require_str(data, 'country').upper()
    if 'category' in data:
        changes['category'] = _category(data)
    if 'type' in data:
        changes['type'] = _type(data)
    if 'gymnastCount' in data:
        changes['gymnast_count'] = _int_in_range(data, 'gymnastCount', 1, MAX_GYMNASTS)
    if 'oldestGymnastAge' in data:
        changes['oldest_gymnast_age'] = _int_in_range(data, 'oldestGymnastAge', 5, 100)
    if 'gymnastFigIds' in data:
        changes['gymnast_fig_ids'] = _fig_id_list(data)
    if 'notes' in data:
        changes['notes'] = _optional_str(data, 'notes')
    return changes


@dataclass
class CreateCoachRequest:
    fig_id: str
    first_name: str
    last_name: str
    full_name: str
    country: str
    tournament_id: str
    gender: Optional[str] = None
    club: Optional[str] = None
    level: Optional[str] = None
    level_description: Optional[str] = None
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name

    @classmethod
    def from_dict(cls, data: dict) -> "CreateCoachRequest":
        data = _require_dict(data)
        person = _person_fields(data)
        return cls(
            club=_optional_str(data, 'club'),
            level=_optional_str(data, 'level'),
            level_description=_optional_str(data, 'levelDescription'),
            **person,
        )


@dataclass
class CreateJudgeRequest:
    fig_id: str
    first_name: str
    last_name: str
    full_name: str
    country: str
    tournament_id: str
    gender: Optional[str] = None
    birth: Optional[str] = None
    category: Optional[str] = None
    category_description: Optional[str] = None
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name

    @classmethod
    def from_dict(cls, data: dict) -> "CreateJudgeRequest":
        data = _require_dict(data)
        person = _person_fields(data)
        category = data.get('category')
        return cls(
            birth=_optional_str(data, 'birth'),
            category=str(category) if category is not None else None,
            category_description=_optional_str(data, 'categoryDescription'),
            **person,
        )


def _fig_id(data: dict) -> str:
    # Registry records arrive with `id` rather than `figId`
    fig_id = data.get('figId', data.get('id'))
    if isinstance(fig_id, int) and not isinstance(fig_id, bool):
        fig_id = str(fig_id)
    if not isinstance(fig_id, str) or not fig_id.strip():
        raise BadRequestError("figId is required")
    return fig_id.strip()


def _name_fields(data: dict) -> Dict[str, Any]:
    first_name = _require_str(data, 'firstName')
    last_name = _require_str(data, 'lastName')
    return {
        'first_name': first_name,
        'last_name': last_name,
        'full_name': _optional_str(data, 'fullName') or f"{first_name} {last_name}",
        'gender': _optional_str(data, 'gender'),
        'country': _require_str(data, 'country').upper(),
        'tournament_id': _require_str(data, 'tournamentId'),
        'notes': _optional_str(data, 'notes'),
    }


def _person_fields(data: dict) -> Dict[str, Any]:
    return {'fig_id': _fig_id(data), **_name_fields(data)}


def parse_person_changes(data: dict, extra_fields: Dict[str, str], with_fig_id: bool = True) -> Dict[str, Any]:
    """Validate a partial coach/judge/support update.

    Identity columns may be changed but never cleared. `extra_fields` maps
    camelCase keys to model attributes for the role-specific columns,
    which accept null.
    """
    data = _require_dict(data)
    changes: Dict[str, Any] = {}
    if with_fig_id and ('figId' in data or 'id' in data):
        changes['fig_id'] = _fig_id(data)
    for key, attr in (('firstName', 'first_name'), ('lastName', 'last_name'),
                      ('fullName', 'full_name'), ('tournamentId', 'tournament_id')):
        if key in data:
            changes[attr] = _require_str(data, key)
    if 'country' in data:
        changes['country'] = _require_str(data, 'country').upper()

    optional = {'gender': 'gender', 'notes': 'notes'}
    optional.update(extra_fields)
    for key, attr in optional.items():
        if key not in data:
            continue
        value = data[key]
        if value is not None and not isinstance(value, str):
            value = str(value)
        if value is not None:
            value = value.strip() or None
        changes[attr] = value
    return changes


# ==================== Support staff ====================

SUPPORT_FIELDS = {
    'role': 'role',
    'club': 'club',
    'email': 'email',
    'phone': 'phone',
}


def _support_role(value) -> str:
    role = parse_support_role(value)
    if role is None:
        raise BadRequestError(f"role must be one of: {', '.join(VALID_SUPPORT_ROLES)}")
    return role.value


def _email(value: Optional[str]) -> Optional[str]:
    if value is not None and not EMAIL_PATTERN.match(value):
        raise BadRequestError(f"Invalid email address: {value}")
    return value


@dataclass
class CreateSupportRequest:
    first_name: str
    last_name: str
    full_name: str
    role: str
    country: str
    tournament_id: str
    gender: Optional[str] = None
    club: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name

    @classmethod
    def from_dict(cls, data: dict) -> "CreateSupportRequest":
        data = _require_dict(data)
        return cls(
            role=_support_role(data.get('role')),
            club=_optional_str(data, 'club'),
            email=_email(_optional_str(data, 'email')),
            phone=_optional_str(data, 'phone'),
            **_name_fields(data),
        )


def parse_support_changes(data: dict) -> Dict[str, Any]:
    changes = parse_person_changes(data, SUPPORT_FIELDS, with_fig_id=False)
    if 'role' in changes:
        changes['role'] = _support_role(changes['role'])
    if 'email' in changes:
        changes['email'] = _email(changes['email'])
    return changes


@dataclass
class CreateLocalCoachRequest:
    """A coach profile the FIG registry does not list."""
    fig_id: str
    first_name: str
    last_name: str
    full_name: str
    gender: str
    country: str
    level: str
    level_description: str
    club: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CreateLocalCoachRequest":
        data = _require_dict(data)
        fig_id = _require_str(data, 'figId')
        first_name = _require_str(data, 'firstName')
        last_name = _require_str(data, 'lastName')
        return cls(
            fig_id=fig_id,
            first_name=first_name,
            last_name=last_name,
            full_name=_optional_str(data, 'fullName') or f"{first_name} {last_name}",
            gender=_gender(data),
            country=_country_code(data),
            level=_require_str(data, 'level'),
            level_description=_require_str(data, 'levelDescription'),
            club=_optional_str(data, 'club'),
        )


@dataclass
class CreateLocalGymnastRequest:
    fig_id: str
    first_name: str
    last_name: str
    gender: str
    country: str
    date_of_birth: date

    @classmethod
    def from_dict(cls, data: dict) -> "CreateLocalGymnastRequest":
        data = _require_dict(data)
        fig_id = _require_str(data, 'figId')
        if not 3 <= len(fig_id) <= 50:
            raise BadRequestError("figId must be between 3 and 50 characters")
        return cls(
            fig_id=fig_id,
            first_name=_require_str(data, 'firstName'),
            last_name=_require_str(data, 'lastName'),
            gender=_gender(data),
            country=_country_code(data),
            date_of_birth=_parse_date(_require_str(data, 'dateOfBirth'), 'dateOfBirth'),
        )


def parse_gymnast_changes(data: dict) -> Dict[str, Any]:
    data = _require_dict(data)
    changes: Dict[str, Any] = {}
    for key, attr in (('firstName', 'first_name'), ('lastName', 'last_name')):
        if key in data:
            changes[attr] = _require_str(data, key)
    if 'gender' in data:
        changes['gender'] = _gender(data)
    if 'country' in data:
        changes['country'] = _require_str(data, 'country').upper()
    if 'dateOfBirth' in data:
        changes['date_of_birth'] = _parse_date(_require_str(data, 'dateOfBirth'), 'dateOfBirth')
    if 'licenseValid' in data:
        if not isinstance(data['licenseValid'], bool):
            raise BadRequestError("licenseValid must be a boolean")
        changes['license_valid'] = data['licenseValid']
    return changes


@dataclass
class BatchRegistrationRequest:
    """Mixed payload; items stay raw so each one fails on its own."""
    tournament: Dict[str, Any]
    country: str
    choreographies: List[dict] = field(default_factory=list)
    coaches: List[dict] = field(default_factory=list)
    judges: List[dict] = field(default_factory=list)

    @property
    def tournament_id(self) -> str:
        return self.tournament['id']

    @property
    def total_items(self) -> int:
        return len(self.choreographies) + len(self.coaches) + len(self.judges)

    @classmethod
    def from_dict(cls, data: dict) -> "BatchRegistrationRequest":
        data = _require_dict(data)
        tournament = data.get('tournament')
        if not isinstance(tournament, dict) or not tournament.get('id'):
            raise BadRequestError("tournament with an id is required")
        lists = {}
        for key in ('choreographies', 'coaches', 'judges'):
            items = data.get(key) or []
            if not isinstance(items, list):
                raise BadRequestError(f"{key} must be a list")
            lists[key] = items
        return cls(
            tournament=tournament,
            country=_require_str(data, 'country').upper(),
            **lists,
        )


@dataclass
class StatusUpdateRequest:
    status: RegistrationStatus
    notes: Optional[str] = None
    registration_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict, require_ids: bool = False) -> "StatusUpdateRequest":
        data = _require_dict(data)
        status = _status(data, 'status')
        ids = data.get('registrationIds', [])
        if require_ids:
            if not isinstance(ids, list) or not ids or any(not isinstance(i, str) for i in ids):
                raise BadRequestError("registrationIds must be a non-empty list of strings")
        return cls(status=status, notes=_optional_str(data, 'notes'), registration_ids=list(ids or []))


@dataclass
class StatusTransitionRequest:
    from_status: RegistrationStatus
    to_status: RegistrationStatus
    country: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "StatusTransitionRequest":
        data = _require_dict(data)
        country = _optional_str(data, 'country')
        return cls(
            from_status=_status(data, 'fromStatus'),
            to_status=_status(data, 'toStatus'),
            country=country.upper() if country else None,
            notes=_optional_str(data, 'notes'),
        )


def _status(data: dict, key: str) -> RegistrationStatus:
    status = parse_status(data.get(key))
    if status is None:
        raise BadRequestError(
            f"{key} must be one of: {', '.join(s.value for s in RegistrationStatus)}"
        )
    return status

