from .models import Judge
from .person_registration import PersonRegistrationService


class JudgeRegistrationService(PersonRegistrationService):
    model = Judge
    kind = 'judge'
    entity_name = 'Judge registration'
    role = 'Judge'
    extra_fields = {
        'birth': 'birth',
        'category': 'category',
        'categoryDescription': 'category_description',
    }

    def get_country_stats(self, country: str) -> dict:
        judges = self.find_all(country=country)

        by_category = {}
        for judge in judges:
            key = judge.category_description or 'Unspecified'
            by_category[key] = by_category.get(key, 0) + 1

        return {
            'totalJudges': len(judges),
            'byTournament': self._count_by_tournament(judges),
            'byCategory': by_category,
        }
