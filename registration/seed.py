from datetime import date

from .business_rules import TournamentType
from .models import db, Tournament

TOURNAMENTS = [
    {
        'name': 'Campeonato Panamericano de Gimnasia Aeróbica',
        'short_name': 'Campeonato Panamericano',
        'type': TournamentType.CAMPEONATO_PANAMERICANO.value,
        'description': 'Pan-American Aerobic Gymnastics Championship. '
                       'Open to Pan-American federations, maximum 2 choreographies per country per category.',
        'start_date': date(2024, 7, 15),
        'end_date': date(2024, 7, 21),
        'location': 'Lima, Peru',
    },
    {
        'name': 'Copa Panamericana de Gimnasia Aeróbica',
        'short_name': 'Copa Panamericana',
        'type': TournamentType.COPA_PANAMERICANA.value,
        'description': 'Pan-American Aerobic Gymnastics Cup. '
                       'Open to Pan-American federations and guest nations, maximum 4 choreographies per country per category.',
        'start_date': date(2024, 9, 10),
        'end_date': date(2024, 9, 16),
        'location': 'Mexico City, Mexico',
    },
]


def seed_tournaments() -> int:
    """Insert the default tournaments that are missing. Returns how many were added."""
    added = 0
    for data in TOURNAMENTS:
        if Tournament.query.filter_by(type=data['type']).first():
            continue
        db.session.add(Tournament(is_active=True, **data))
        added += 1
    db.session.commit()
    return added
