from typing import List

from shared.errors import BadRequestError
from .categories import VALID_SUPPORT_ROLES, parse_support_role
from .models import SupportStaff
from .person_registration import PersonRegistrationService
from .requests import SUPPORT_FIELDS


class SupportRegistrationService(PersonRegistrationService):
    """Delegation leaders, medics and companions. No fig id, so no duplicate check."""

    model = SupportStaff
    kind = 'support'
    entity_name = 'Support registration'
    role = 'Support staff'
    extra_fields = SUPPORT_FIELDS
    unique_fig_id = False

    def find_all(self, country: str = None, tournament_id: str = None, role: str = None) -> List[SupportStaff]:
        query = self._scoped_query(country, tournament_id)
        if role:
            parsed = parse_support_role(role)
            if parsed is None:
                raise BadRequestError(f"role must be one of: {', '.join(VALID_SUPPORT_ROLES)}")
            query = query.filter(SupportStaff.role == parsed.value)
        return query.order_by(SupportStaff.created_at.desc()).all()
