# backend/tests/unit/services/search/test_relevance.py
from __future__ import annotations

from app.services.search.candidates import ProductCandidate
from app.services.search.relevance import relevance_terms, score_product, score_products


def _product(name: str, description: str = "", categories=()) -> ProductCandidate:
    return ProductCandidate(
        id=name.lower().replace(" ", "-"),
        name=name,
        description=description or None,
        categories=tuple(categories),
    )


class TestScoreProduct:
    def test_whole_query_in_name(self) -> None:
        product = _product("Joint Support Supplements", categories=["Supplements"])
        # 100 (name) + 10 (word in text) + 15 (word in category)
        assert score_product(product, "supplements") == 125

    def test_word_in_description_only(self) -> None:
        product = _product("Omega Fish Oil", "Daily supplements for a shiny coat")
        assert score_product(product, "supplements") == 10

    def test_words_are_scored_independently(self) -> None:
        product = _product("Salmon Kibble", "Grain free recipe", categories=["Food"])
        # "grain" and "free" in text, "food" in text and category
        assert score_product(product, "grain free food") == 10 + 10 + 10 + 15

    def test_short_words_are_ignored(self) -> None:
        product = _product("Ox Tail Chew", "An ox chew")
        assert score_product(product, "ox") == 100
        assert score_product(product, "ox treat") == 0

    def test_case_insensitive(self) -> None:
        assert score_product(_product("CHEW TOY"), "chew toy") == 100 + 10 + 10

    def test_empty_query(self) -> None:
        assert score_product(_product("Anything"), "  ") == 0


class TestScoreProducts:
    def test_drops_low_scores_and_sorts_descending(self) -> None:
        products = [
            _product("Squeaky Ball", "Durable rubber ball", ["Toys"]),
            _product("Omega Fish Oil", "Daily supplements for a shiny coat", ["Supplements"]),
            _product("Joint Support Supplements", "Glucosamine chews", ["Supplements"]),
        ]
        ranked = score_products(products, "supplements", min_score=5)
        assert [p.name for p in ranked] == ["Joint Support Supplements", "Omega Fish Oil"]
        assert [p.relevance_score for p in ranked] == [125, 25]

    def test_ties_keep_input_order(self) -> None:
        products = [_product("Beta Chew"), _product("Alpha Chew")]
        ranked = score_products(products, "chew", min_score=5)
        assert [p.name for p in ranked] == ["Beta Chew", "Alpha Chew"]

    def test_threshold_from_config(self) -> None:
        from app.services.search.config import update_search_config

        update_search_config(min_relevance_score=50)
        products = [_product("Omega Fish Oil", "supplements")]
        assert score_products(products, "supplements") == []

    def test_threshold_is_inclusive(self) -> None:
        products = [_product("Omega Fish Oil", "supplements")]
        assert [p.relevance_score for p in score_products(products, "supplements", min_score=10)] == [10]


class TestRelevanceTerms:
    def test_whole_query_then_scoring_words(self) -> None:
        assert relevance_terms("fish oil for dogs") == ("fish oil for dogs", "fish", "oil", "for", "dogs")

    def test_short_words_only_keep_the_whole_query(self) -> None:
        assert relevance_terms("ok") == ("ok",)

    def test_single_word_is_not_repeated(self) -> None:
        assert relevance_terms(" Supplements ") == ("supplements",)

    def test_empty_query(self) -> None:
        assert relevance_terms("   ") == ()
