"""
Tests for sauce rule resolution and free-quota allocation.
"""
import logging

import pytest

from sushi_orders.pricing.models import SauceRule
from sushi_orders.pricing.sauce_rules import (
    RULE_COUNT,
    RULE_NONE,
    RULE_PER_SAUCE,
    SauceRuleError,
    allocate_sauces,
    default_free_sauces,
    free_soy_for_set,
    is_set_month,
    parse_set_number,
    resolve_sauce_rule,
)
from sushi_orders.pricing.vocabulary import BASE_SAUCES, DEFAULT_VOCABULARY, SWEET_POTATO_SAUCES


def flat_price(sauce):
    return 2.0


class TestResolveSauceRule:
    """First matching rule wins; nothing matching means no free sauce."""

    def test_tempura_mix(self):
        rule = resolve_sauce_rule("Tempura Mix", "przystawki")
        assert rule.kind == RULE_PER_SAUCE
        assert rule.free_by_sauce == {"Teryiaki": 1, "Spicy Mayo": 1}
        assert rule.hint

    def test_sweet_potato_fries_in_regional_restaurant(self):
        rule = resolve_sauce_rule("Frytki z batatów", "przystawki", "szczytno")
        assert rule.kind == RULE_COUNT
        assert rule.free_count == 1
        assert rule.eligible == SWEET_POTATO_SAUCES

    def test_sweet_potato_fries_elsewhere(self):
        rule = resolve_sauce_rule("Frytki z batatów", "przystawki", "ciechanow")
        assert rule.kind == RULE_NONE
        assert rule.eligible == BASE_SAUCES

    def test_single_roll(self):
        rule = resolve_sauce_rule("Futomak Łosoś", "futomaki")
        assert rule.kind == RULE_COUNT
        assert rule.free_count == 1

    def test_roll_recognized_by_name_without_subcategory(self):
        assert resolve_sauce_rule("California Krewetka").kind == RULE_COUNT

    def test_other_dishes_get_nothing(self):
        rule = resolve_sauce_rule("Tatar z łososia", "tatary")
        assert rule.kind == RULE_NONE
        assert rule.free_count == 0
        assert rule.free_by_sauce == {}

    @pytest.mark.parametrize("name,free", [
        ("Zestaw 5", 1),
        ("Zestaw 7", 1),
        ("Zestaw 10", 2),
        ("Zestaw 12", 2),
        ("Zestaw 13", 3),
        ("Zestaw 100 szt", 4),
        ("Tutaj Specjał", 2),
        ("Zestaw miesiąca", 1),
        ("Zestaw Nigiri", 1),
    ])
    def test_free_soy_by_set(self, name, free):
        rule = resolve_sauce_rule(name, "zestawy")
        assert rule.kind == RULE_PER_SAUCE
        assert rule.free_by_sauce == {"Sos sojowy": free}

    def test_set_recognized_from_name(self):
        assert resolve_sauce_rule("Lunch 2").kind == RULE_PER_SAUCE

    def test_tempura_rule_wins_over_set(self):
        rule = resolve_sauce_rule("Zestaw Tempura Mix", "zestawy")
        assert rule.free_by_sauce == {"Teryiaki": 1, "Spicy Mayo": 1}


class TestSetNames:

    def test_parse_set_number(self):
        assert parse_set_number("Zestaw 10") == 10
        assert parse_set_number("zestaw10") == 10
        assert parse_set_number("Zestaw-5") == 5
        assert parse_set_number("Zestaw Nigiri") is None

    def test_set_of_the_month(self):
        assert is_set_month("Zestaw miesiąca")
        assert is_set_month("ZESTAW-MIESIACA")
        assert not is_set_month("Zestaw 5")
        assert not is_set_month(None)

    def test_misspelled_special(self):
        assert free_soy_for_set("Turtaj Specjał") == 2


class TestAllocateSauces:
    """Free units are taken first; everything else is charged."""

    def test_per_sauce_allowance(self):
        rule = resolve_sauce_rule("Zestaw 5", "zestawy")
        allocation = allocate_sauces({"Sos sojowy": 3}, rule, flat_price)
        line = allocation.for_sauce("Sos sojowy")
        assert (line.requested, line.free, line.charged) == (3, 1, 2)
        assert allocation.cost == pytest.approx(4.0)

    def test_per_sauce_does_not_free_other_sauces(self):
        rule = resolve_sauce_rule("Zestaw 5", "zestawy")
        allocation = allocate_sauces({"Mango": 1}, rule, flat_price)
        assert allocation.charged_by_sauce == {"Mango": 1}

    def test_count_pool_follows_priority(self):
        rule = resolve_sauce_rule("Futomak Vege", "futomaki")
        allocation = allocate_sauces({"Sriracha": 1, "Mango": 1}, rule, flat_price)
        assert allocation.free_by_sauce == {"Mango": 1}
        assert allocation.charged_by_sauce == {"Sriracha": 1}
        assert [line.sauce for line in allocation.lines] == ["Mango", "Sriracha"]

    def test_ineligible_sauce_is_charged(self):
        rule = resolve_sauce_rule("Frytki z batatów", "przystawki", "szczytno")
        allocation = allocate_sauces({"Mango": 1}, rule, flat_price)
        assert allocation.free_by_sauce == {}
        assert allocation.cost == pytest.approx(2.0)

    def test_none_rule_charges_everything(self):
        rule = SauceRule(kind=RULE_NONE, eligible=BASE_SAUCES)
        allocation = allocate_sauces({"Mango": 2, "Sos sojowy": 1}, rule, flat_price)
        assert allocation.cost == pytest.approx(6.0)

    def test_conservation(self):
        rule = resolve_sauce_rule("Tempura Mix")
        allocation = allocate_sauces({"Teryiaki": 2, "Spicy Mayo": 1, "Mango": 4}, rule, flat_price)
        for line in allocation.lines:
            assert line.free + line.charged == line.requested
            assert line.free >= 0 and line.charged >= 0

    def test_independent_of_input_order(self):
        rule = resolve_sauce_rule("Futomak Vege", "futomaki")
        first = allocate_sauces({"Żurawina": 2, "Mango": 1, "Teryiaki": 1}, rule, flat_price)
        second = allocate_sauces({"Teryiaki": 1, "Mango": 1, "Żurawina": 2}, rule, flat_price)
        assert first == second

    def test_unknown_sauces_sort_after_priority(self):
        rule = SauceRule(kind=RULE_NONE, eligible=BASE_SAUCES)
        allocation = allocate_sauces({"Zzz": 1, "Aaa": 1, "Mango": 1}, rule, flat_price)
        assert [line.sauce for line in allocation.lines] == ["Mango", "Aaa", "Zzz"]

    def test_zero_counts_are_skipped(self):
        rule = resolve_sauce_rule("Futomak Vege", "futomaki")
        assert allocate_sauces({"Mango": 0}, rule, flat_price).lines == ()

    def test_free_units_skip_price_lookup(self):
        def failing(sauce):
            raise AssertionError("price lookup should not be called")

        rule = resolve_sauce_rule("Futomak Vege", "futomaki")
        assert allocate_sauces({"Mango": 1}, rule, failing).cost == 0.0


class TestFallbackPrice:
    """A charged sauce is never free because the price lookup failed."""

    def test_failing_lookup_uses_fallback(self, caplog):
        def broken(sauce):
            raise RuntimeError("price list unavailable")

        rule = SauceRule(kind=RULE_NONE, eligible=BASE_SAUCES)
        with caplog.at_level(logging.WARNING):
            allocation = allocate_sauces({"Mango": 2}, rule, broken)
        assert allocation.cost == pytest.approx(4.0)
        assert "using fallback" in caplog.text

    @pytest.mark.parametrize("price", [0, -1, float("nan"), float("inf")])
    def test_non_positive_price_uses_fallback(self, price):
        vocab = DEFAULT_VOCABULARY.with_prices(sauce_fallback_price=3.5)
        rule = SauceRule(kind=RULE_NONE, eligible=BASE_SAUCES)
        allocation = allocate_sauces({"Mango": 1}, rule, lambda s: price, vocab)
        assert allocation.for_sauce("Mango").unit_price == 3.5


class TestRuleValidation:

    def test_unknown_kind(self):
        with pytest.raises(SauceRuleError):
            allocate_sauces({"Mango": 1}, SauceRule(kind="bogus", eligible=BASE_SAUCES), flat_price)

    def test_negative_free_count(self):
        rule = SauceRule(kind=RULE_COUNT, eligible=BASE_SAUCES, free_count=-1)
        with pytest.raises(SauceRuleError):
            allocate_sauces({"Mango": 1}, rule, flat_price)

    def test_negative_per_sauce_units(self):
        rule = SauceRule(kind=RULE_PER_SAUCE, eligible=BASE_SAUCES, free_by_sauce={"Mango": -2})
        with pytest.raises(SauceRuleError):
            default_free_sauces(rule)


class TestDefaultFreeSauces:

    def test_per_sauce(self):
        rule = resolve_sauce_rule("Zestaw 10", "zestawy")
        assert default_free_sauces(rule) == ["Sos sojowy", "Sos sojowy"]

    def test_count_takes_first_by_priority(self):
        rule = resolve_sauce_rule("Futomak Vege", "futomaki")
        assert default_free_sauces(rule) == ["Sos sojowy"]

    def test_sweet_potato_pool(self):
        rule = resolve_sauce_rule("Frytki z batatów", "przystawki", "przasnysz")
        assert default_free_sauces(rule) == ["Teryiaki"]

    def test_none(self):
        assert default_free_sauces(resolve_sauce_rule("Edamame", "przystawki")) == []
