"""
Tournament-kind eligibility and quota rules.

Each tournament kind maps to exactly one strategy. Adding a kind means adding
a TournamentType member, a strategy class, and a resolver entry.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from shared.errors import BadRequestError, ConfigurationError
from .categories import ChoreographyCategory, ChoreographyType


class TournamentType(str, Enum):
    CAMPEONATO_PANAMERICANO = "CAMPEONATO_PANAMERICANO"
    COPA_PANAMERICANA = "COPA_PANAMERICANA"


PAN_AMERICAN_COUNTRIES = [
    'ARG', 'BOL', 'BRA', 'CAN', 'CHI', 'COL', 'CRC', 'CUB', 'DOM', 'ECU',
    'ESA', 'GUA', 'HAI', 'HON', 'JAM', 'MEX', 'NCA', 'PAN', 'PAR', 'PER',
    'PUR', 'TTO', 'URU', 'USA', 'VEN',
]

GUEST_COUNTRIES = ['ESP', 'POR', 'ITA', 'FRA', 'GER', 'GBR', 'JPN', 'KOR', 'CHN', 'AUS']


@dataclass
class RuleCheckRequest:
    """The subset of a choreography request the strategies look at."""
    country: str
    category: ChoreographyCategory
    type: ChoreographyType
    gymnast_count: int
    gymnast_fig_ids: List[str] = field(default_factory=list)
    tournament_id: Optional[str] = None


class BusinessRulesStrategy(ABC):
    tournament_type: TournamentType
    display_name: str

    @abstractmethod
    def max_per_country_per_category(self) -> int:
        pass

    @abstractmethod
    def eligible_countries(self) -> List[str]:
        pass

    @abstractmethod
    def additional_rules(self) -> List[str]:
        pass

    def validate(self, request: RuleCheckRequest, existing_count: int) -> None:
        """Raise BadRequestError when the choreography may not be created."""
        max_allowed = self.max_per_country_per_category()
        category = getattr(request.category, 'value', request.category)
        if existing_count >= max_allowed:
            raise BadRequestError(
                f"{self.display_name} allows maximum {max_allowed} choreographies per country "
                f"per category. {request.country} already has {existing_count} in {category} category."
            )

        if not request.gymnast_fig_ids:
            raise BadRequestError(f"At least one gymnast is required for {self.display_name}")

        eligible = self.eligible_countries()
        if (request.country or '').upper() not in eligible:
            raise BadRequestError(
                f"Country {request.country} is not eligible for {self.display_name}. "
                f"Eligible countries: {', '.join(eligible)}"
            )

    def describe(self) -> dict:
        return {
            'tournamentType': self.tournament_type.value,
            'name': self.display_name,
            'maxPerCountryPerCategory': self.max_per_country_per_category(),
            'eligibleCountries': self.eligible_countries(),
            'rules': self.additional_rules(),
        }


class CampeonatoPanamericanoStrategy(BusinessRulesStrategy):
    tournament_type = TournamentType.CAMPEONATO_PANAMERICANO
    display_name = "Campeonato Panamericano"

    def max_per_country_per_category(self) -> int:
        return 2

    def eligible_countries(self) -> List[str]:
        return list(PAN_AMERICAN_COUNTRIES)

    def additional_rules(self) -> List[str]:
        return [
            'Maximum 2 choreographies per country per category',
            'Only Pan-American federations may enter',
            'All gymnasts must hold a valid FIG license',
        ]


class CopaPanamericanaStrategy(BusinessRulesStrategy):
    tournament_type = TournamentType.COPA_PANAMERICANA
    display_name = "Copa Panamericana"

    def max_per_country_per_category(self) -> int:
        return 4

    def eligible_countries(self) -> List[str]:
        return PAN_AMERICAN_COUNTRIES + GUEST_COUNTRIES

    def additional_rules(self) -> List[str]:
        return [
            'Maximum 4 choreographies per country per category',
            'Open to Pan-American federations and guest nations',
            'All gymnasts must hold a valid FIG license',
        ]


class BusinessRulesResolver:
    """Closed map from tournament kind to its rules strategy."""

    def __init__(self):
        self._strategies: Dict[TournamentType, BusinessRulesStrategy] = {}
        for strategy in (CampeonatoPanamericanoStrategy(), CopaPanamericanaStrategy()):
            self._strategies[strategy.tournament_type] = strategy

    def get_strategy(self, tournament_type) -> BusinessRulesStrategy:
        try:
            key = TournamentType(getattr(tournament_type, 'value', tournament_type))
        except ValueError:
            key = None
        strategy = self._strategies.get(key)
        if strategy is None:
            raise ConfigurationError(
                f"No business rules strategy found for tournament type: {tournament_type}"
            )
        return strategy

    def supported_kinds(self) -> List[TournamentType]:
        return list(self._strategies.keys())
