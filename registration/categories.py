from datetime import date
from enum import Enum
from typing import Iterable, Optional


class ChoreographyCategory(str, Enum):
    YOUTH = "YOUTH"
    JUNIOR = "JUNIOR"
    SENIOR = "SENIOR"


class ChoreographyType(str, Enum):
    MIND = "MIND"   # Men's Individual
    WIND = "WIND"   # Women's Individual
    MXP = "MXP"     # Mixed Pair
    TRIO = "TRIO"
    GRP = "GRP"     # Group
    DNCE = "DNCE"   # Dance


class SupportRole(str, Enum):
    DELEGATION_LEADER = "DELEGATION_LEADER"
    MEDIC = "MEDIC"
    COMPANION = "COMPANION"


# FIG age brackets, inclusive
AGE_LIMITS = {
    ChoreographyCategory.YOUTH: (0, 14),
    ChoreographyCategory.JUNIOR: (15, 17),
    ChoreographyCategory.SENIOR: (18, 100),
}

CHOREOGRAPHY_TYPE_INFO = {
    ChoreographyType.MIND: {"name": "Men's Individual", "count": 1},
    ChoreographyType.WIND: {"name": "Women's Individual", "count": 1},
    ChoreographyType.MXP: {"name": "Mixed Pair", "count": 2},
    ChoreographyType.TRIO: {"name": "Trio", "count": 3},
    ChoreographyType.GRP: {"name": "Group", "count": 5},
    ChoreographyType.DNCE: {"name": "Dance", "count": 8},
}

VALID_CATEGORIES = [c.value for c in ChoreographyCategory]
VALID_CHOREOGRAPHY_TYPES = [t.value for t in ChoreographyType]
MAX_GYMNASTS = max(info["count"] for info in CHOREOGRAPHY_TYPE_INFO.values())
VALID_SUPPORT_ROLES = [r.value for r in SupportRole]


def parse_category(value) -> Optional[ChoreographyCategory]:
    if isinstance(value, ChoreographyCategory):
        return value
    try:
        return ChoreographyCategory(str(value).upper())
    except ValueError:
        return None


def parse_type(value) -> Optional[ChoreographyType]:
    if isinstance(value, ChoreographyType):
        return value
    try:
        return ChoreographyType(str(value).upper())
    except ValueError:
        return None


def mandated_gymnast_count(choreography_type: ChoreographyType) -> int:
    return CHOREOGRAPHY_TYPE_INFO[choreography_type]["count"]


def calculate_category(oldest_age: int) -> ChoreographyCategory:
    """Category for a choreography whose oldest gymnast is `oldest_age` years old."""
    if oldest_age <= AGE_LIMITS[ChoreographyCategory.YOUTH][1]:
        return ChoreographyCategory.YOUTH
    if oldest_age <= AGE_LIMITS[ChoreographyCategory.JUNIOR][1]:
        return ChoreographyCategory.JUNIOR
    return ChoreographyCategory.SENIOR


def is_age_in_category(age: int, category: ChoreographyCategory) -> bool:
    low, high = AGE_LIMITS[category]
    return low <= age <= high


def calculate_age(birth_date: date, today: date = None) -> int:
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def generate_choreography_name(surnames: Iterable[str]) -> str:
    """Build a name like 'SMITH-JONES-BROWN' from gymnast surnames."""
    return "-".join(s.strip().upper() for s in surnames if s and s.strip())


def parse_support_role(value) -> Optional[SupportRole]:
    if isinstance(value, SupportRole):
        return value
    try:
        return SupportRole(str(value).strip().upper())
    except ValueError:
        return None
