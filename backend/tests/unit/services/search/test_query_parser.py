# backend/tests/unit/services/search/test_query_parser.py
"""Unit tests for the rule-based directory query parser."""
from __future__ import annotations

from typing import List

import pytest

from app.services.search.query_parser import (
    CategoryDefinition,
    CategoryKeywordPolicy,
    LocationMode,
    QueryParser,
    SynonymRule,
    find_state,
    normalize_query,
)


@pytest.fixture
def categories() -> List[CategoryDefinition]:
    return [
        CategoryDefinition("dog_park", "Dog Park", ("off leash",)),
        CategoryDefinition("groomer", "Groomer", ("grooming",)),
        CategoryDefinition("veterinarian", "Veterinarian", ("animal hospital",)),
        CategoryDefinition("dog_trainer", "Dog Trainer", ("obedience",)),
        CategoryDefinition("boarding_daycare", "Boarding & Daycare", ("kennel",)),
    ]


@pytest.fixture
def parser() -> QueryParser:
    return QueryParser(default_radius_miles=25.0)


class TestNormalization:
    def test_lowercases_and_collapses_whitespace(self) -> None:
        assert normalize_query("  Dog   PARKS\tin  Ohio ") == "dog parks in ohio"

    def test_none_becomes_empty(self) -> None:
        assert normalize_query(None) == ""  # type: ignore[arg-type]


class TestShortAndNumericQueries:
    @pytest.mark.parametrize("query", ["a", " ", "7", "12", "123456"])
    def test_returns_bare_intent(self, parser: QueryParser, categories, query: str) -> None:
        intent = parser.parse(query, categories)
        assert intent.service_category is None
        assert intent.location_mode is LocationMode.NONE
        assert intent.location_value is None

    def test_five_digit_number_is_a_postal_code(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("46240", categories)
        assert intent.location_mode is LocationMode.POSTAL_RADIUS
        assert intent.location_value == "46240"
        assert intent.radius_miles == 25.0
        assert intent.service_category is None


class TestCategoryDetection:
    def test_display_name(self, parser: QueryParser, categories) -> None:
        assert parser.parse("dog parks in indiana", categories).service_category == "dog_park"

    def test_display_name_inside_plural(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("groomers near me", categories)
        assert intent.service_category == "groomer"
        assert intent.matched_terms == ("groomer",)

    def test_keyword(self, parser: QueryParser, categories) -> None:
        assert parser.parse("kennel in ohio", categories).service_category == "boarding_daycare"

    def test_synonym_rule(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("vets 46240", categories)
        assert intent.service_category == "veterinarian"
        assert intent.matched_terms == ("vet",)

    def test_first_definition_wins(self, parser: QueryParser, categories) -> None:
        assert parser.parse("dog park or groomer", categories).service_category == "dog_park"

    def test_no_category(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("something fun in ohio", categories)
        assert intent.service_category is None
        assert intent.location_mode is LocationMode.STATE

    def test_fallback_table_when_no_definitions(self, parser: QueryParser) -> None:
        assert parser.parse("dogpark near me").service_category == "dog_park"
        assert parser.parse("puppy training classes").service_category == "dog_trainer"
        assert parser.parse("doggy daycare").service_category == "boarding_daycare"

    def test_injected_policy_replaces_defaults(self) -> None:
        policy = CategoryKeywordPolicy(
            synonym_rules=(SynonymRule("walker", ("walker", "dog walking")),),
            fallback_table=(("dog_walker", ("walk",)),),
        )
        parser = QueryParser(policy=policy, default_radius_miles=10.0)

        assert parser.parse("dog walks in ohio").service_category == "dog_walker"
        # Defaults are gone entirely
        assert parser.parse("groomers in ohio").service_category is None

        walkers = [CategoryDefinition("dog_walker", "Walker Service")]
        assert parser.parse("dog walking 46240", walkers).service_category == "dog_walker"


class TestLocationDetection:
    def test_near_me_phrase(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("groomers near me", categories)
        assert intent.location_mode is LocationMode.NEAR_ME
        assert intent.location_value is None
        assert intent.radius_miles == 25.0

    @pytest.mark.parametrize(
        "query",
        ["vets nearby", "local groomers in ohio", "trainers in my area", "parks within driving distance"],
    )
    def test_proximity_phrases_beat_states(self, parser: QueryParser, categories, query) -> None:
        assert parser.parse(query, categories).location_mode is LocationMode.NEAR_ME

    def test_proximity_word_without_state(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("groomers close to downtown", categories)
        assert intent.location_mode is LocationMode.NEAR_ME

    def test_proximity_word_with_state_is_a_state_search(self, parser, categories) -> None:
        intent = parser.parse("dog parks near Chicago, IL", categories)
        assert intent.location_mode is LocationMode.STATE
        assert intent.location_value == "IL"

    def test_close_to_state_name_is_a_state_search(self, parser, categories) -> None:
        intent = parser.parse("groomers close to indiana", categories)
        assert intent.location_mode is LocationMode.STATE
        assert intent.location_value == "IN"

    def test_state_name(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("dog parks in Indiana", categories)
        assert intent.location_mode is LocationMode.STATE
        assert intent.location_value == "IN"
        assert intent.radius_miles is None

    def test_longer_state_name_wins(self, parser: QueryParser, categories) -> None:
        assert parser.parse("groomers in west virginia", categories).location_value == "WV"
        assert parser.parse("vets in washington dc", categories).location_value == "DC"

    def test_state_code_token(self, parser: QueryParser, categories) -> None:
        assert parser.parse("trainers, tx", categories).location_value == "TX"

    def test_state_names_need_word_boundaries(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("dog parks for new yorkers", categories)
        assert intent.location_mode is LocationMode.NONE

    def test_postal_code_beats_state(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("groomers in ohio 46240", categories)
        assert intent.location_mode is LocationMode.POSTAL_RADIUS
        assert intent.location_value == "46240"

    def test_postal_code_beats_near_me(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("vets near me 46037", categories)
        assert intent.location_mode is LocationMode.POSTAL_RADIUS
        assert intent.location_value == "46037"

    def test_six_digit_run_is_not_a_postal_code(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("groomers 462401", categories)
        assert intent.location_mode is LocationMode.NONE

    def test_no_location(self, parser: QueryParser, categories) -> None:
        intent = parser.parse("groomers", categories)
        assert intent.location_mode is LocationMode.NONE
        assert not intent.has_location

    def test_radius_comes_from_search_config(self, categories) -> None:
        from app.services.search.config import update_search_config

        update_search_config(default_radius_miles=10.0)
        assert QueryParser().parse("vets 46240", categories).radius_miles == 10.0


class TestFindState:
    def test_full_name_before_code(self) -> None:
        # "me" is Maine's code but the full name appears first in priority
        assert find_state("groomers for me in ohio") == "OH"

    def test_short_words_count_as_codes(self) -> None:
        assert find_state("groomers in town") == "IN"

    def test_none(self) -> None:
        assert find_state("groomers downtown") is None
