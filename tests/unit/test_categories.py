"""
Unit tests for category and choreography type helpers.
"""
from datetime import date

import pytest

from registration.categories import (
    ChoreographyCategory,
    ChoreographyType,
    calculate_age,
    calculate_category,
    generate_choreography_name,
    is_age_in_category,
    mandated_gymnast_count,
    parse_category,
    parse_type,
)


class TestMandatedCounts:

    @pytest.mark.parametrize('choreography_type,count', [
        (ChoreographyType.MIND, 1),
        (ChoreographyType.WIND, 1),
        (ChoreographyType.MXP, 2),
        (ChoreographyType.TRIO, 3),
        (ChoreographyType.GRP, 5),
        (ChoreographyType.DNCE, 8),
    ])
    def test_count_per_type(self, choreography_type, count):
        assert mandated_gymnast_count(choreography_type) == count


class TestCategoryFromAge:

    def test_boundaries(self):
        """14 is the last YOUTH age and 17 the last JUNIOR age."""
        assert calculate_category(14) == ChoreographyCategory.YOUTH
        assert calculate_category(15) == ChoreographyCategory.JUNIOR
        assert calculate_category(17) == ChoreographyCategory.JUNIOR
        assert calculate_category(18) == ChoreographyCategory.SENIOR

    def test_is_age_in_category(self):
        assert is_age_in_category(16, ChoreographyCategory.JUNIOR)
        assert not is_age_in_category(16, ChoreographyCategory.SENIOR)


class TestCalculateAge:

    def test_before_birthday(self):
        assert calculate_age(date(2000, 6, 15), today=date(2024, 6, 14)) == 23

    def test_on_birthday(self):
        assert calculate_age(date(2000, 6, 15), today=date(2024, 6, 15)) == 24


class TestParsing:

    def test_parse_is_case_insensitive(self):
        assert parse_category('junior') == ChoreographyCategory.JUNIOR
        assert parse_type('mxp') == ChoreographyType.MXP

    def test_parse_unknown_returns_none(self):
        assert parse_category('MASTERS') is None
        assert parse_type('SOLO') is None
        assert parse_type(None) is None


class TestChoreographyName:

    def test_joins_upper_cased_surnames(self):
        assert generate_choreography_name(['Smith', 'jones', ' Brown ']) == 'SMITH-JONES-BROWN'

    def test_skips_blank_surnames(self):
        assert generate_choreography_name(['Smith', '', None]) == 'SMITH'
