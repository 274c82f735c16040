from .models import Coach
from .person_registration import PersonRegistrationService


class CoachRegistrationService(PersonRegistrationService):
    model = Coach
    kind = 'coach'
    entity_name = 'Coach registration'
    role = 'Coach'
    extra_fields = {
        'club': 'club',
        'level': 'level',
        'levelDescription': 'level_description',
    }

    def get_country_stats(self, country: str) -> dict:
        coaches = self.find_all(country=country)
        return {
            'totalCoaches': len(coaches),
            'byTournament': self._count_by_tournament(coaches),
        }
