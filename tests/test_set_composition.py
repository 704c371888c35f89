"""
Tests for set description parsing and swap matching.
"""
import pytest

from sushi_orders.pricing.models import SetRow, SwapIntent
from sushi_orders.pricing.set_composition import (
    are_ingredient_synonyms,
    find_row,
    is_noop_swap,
    match_swaps,
    parse_set_composition,
    parse_set_upgrade,
    parse_swaps,
    row_bake_allowed,
    split_arrow,
    swap_candidates,
    swap_compare_key,
    swap_fee_count,
    with_category_prefix,
)


SET_5 = (
    "20 szt: 6x Futomaki łosoś surowy, 6x Futomaki krewetka w tempurze, 8x Hosomaki ogórek\n"
    "Powiększ zestaw: 20 szt + 6 szt za 1 zł = 26 szt"
)


@pytest.fixture
def rows():
    return parse_set_composition(SET_5)


class TestParseSetComposition:
    """Rows come from the ``N x <Category> <ingredient>`` parts of a description."""

    def test_rows_of_a_set(self, rows):
        assert [(r.qty, r.category, r.ingredient) for r in rows] == [
            (6, "Futomaki", "łosoś surowy"),
            (6, "Futomaki", "krewetka w tempurze"),
            (8, "Hosomaki", "ogórek"),
        ]

    def test_rows_glued_with_plus(self):
        rows = parse_set_composition("8x Futomaki łosoś+8x Hosomaki ogórek")
        assert [r.label for r in rows] == ["Futomaki łosoś", "Hosomaki ogórek"]

    def test_bake_note_and_price_tail_are_removed(self):
        rows = parse_set_composition(
            "16 szt: 8x Futomaki łosoś surowy (wersja pieczona +2 zł), 8x Hosomaki ogórek za 5 zł"
        )
        assert [r.ingredient for r in rows] == ["łosoś surowy", "ogórek"]

    def test_no_rows(self):
        assert parse_set_composition("Surowy łosoś, ogórek, serek, 8 szt") == []
        assert parse_set_composition(None) == []


class TestSetRowKey:

    def test_fish_goes_first_in_combined_rows(self):
        row = SetRow(qty=8, category="Futomaki", ingredient="ogórek + łosoś")
        assert row.key == "Futomaki łosoś + ogórek"
        assert row.label == "Futomaki ogórek + łosoś"

    def test_simple_row_key_is_its_label(self, rows):
        assert rows[0].key == rows[0].label == "Futomaki łosoś surowy"

    def test_find_row_by_key_or_ingredient(self, rows):
        assert find_row(rows, "futomaki łosoś surowy") is rows[0]
        assert find_row(rows, "ogórek") is rows[2]
        assert find_row(rows, "Tamago") is None


class TestSwapComparison:

    def test_category_and_quantity_are_ignored(self):
        assert swap_compare_key("Hosomaki Łosoś surowy") == "łosoś surowy"
        assert swap_compare_key("2x Futomak Tamago") == "tamago"

    def test_noop_swap(self):
        assert is_noop_swap("łosoś surowy", "Futomaki Łosoś surowy")
        assert not is_noop_swap("łosoś surowy", "Tamago")


class TestMatchSwaps:
    """The fee follows the current rows and swaps, never a running counter."""

    def test_swap_charges_the_fee(self, rows):
        matches = match_swaps(rows, [SwapIntent("Futomaki łosoś surowy", "Tamago")])
        assert matches[0].effective_ingredient == "Tamago"
        assert matches[0].fee_applies
        assert swap_fee_count(matches) == 1

    def test_bake_eligibility(self, rows):
        matches = match_swaps(rows, [])
        assert [m.bake_allowed for m in matches] == [True, False, False]

    def test_swapped_row_is_judged_by_its_new_ingredient(self, rows):
        matches = match_swaps(rows, [SwapIntent("Futomaki łosoś surowy", "Tamago")])
        assert not matches[0].bake_allowed

    def test_last_swap_for_a_row_wins(self, rows):
        matches = match_swaps(rows, [
            SwapIntent("Futomaki łosoś surowy", "Tamago"),
            SwapIntent("łosoś surowy", "Tuńczyk surowy"),
        ])
        assert matches[0].effective_ingredient == "Tuńczyk surowy"
        assert matches[0].bake_allowed
        assert swap_fee_count(matches) == 1

    def test_swapping_back_drops_the_fee(self, rows):
        matches = match_swaps(rows, [
            SwapIntent("Futomaki łosoś surowy", "Tamago"),
            SwapIntent("Futomaki łosoś surowy", "Łosoś surowy"),
        ])
        assert matches[0].effective_ingredient == "łosoś surowy"
        assert swap_fee_count(matches) == 0

    def test_unmatched_swaps_are_ignored(self, rows):
        matches = match_swaps(rows, [SwapIntent("Nigiri węgorz", "Tamago")])
        assert swap_fee_count(matches) == 0

    def test_describe_feeds_bake_eligibility(self, rows):
        descriptions = {"Futomak Łosoś": "Surowy łosoś, ogórek, serek, 8 szt"}
        matches = match_swaps(
            rows,
            [SwapIntent("Futomaki krewetka w tempurze", "Futomak Łosoś")],
            describe=descriptions.get,
        )
        assert matches[1].bake_allowed

    def test_row_bake_allowed(self):
        assert row_bake_allowed("Futomaki tuńczyk")
        assert not row_bake_allowed("California łosoś pieczony")
        assert not row_bake_allowed("Hosomaki ogórek")


class TestParseSwaps:

    def test_objects_and_arrow_strings(self):
        raw = [
            {"from": "Futomaki łosoś surowy", "to": "Tamago"},
            "Hosomaki ogórek → Awokado",
            "Hosomaki ogórek -> Mango",
            "bez strzałki",
            5,
            {"from": "", "to": "Tamago"},
        ]
        assert [(s.from_key, s.to) for s in parse_swaps(raw)] == [
            ("Futomaki łosoś surowy", "Tamago"),
            ("Hosomaki ogórek", "Awokado"),
            ("Hosomaki ogórek", "Mango"),
        ]

    def test_single_string(self):
        assert parse_swaps("A => B") == [SwapIntent("A", "B")]

    def test_split_arrow_without_arrow(self):
        assert split_arrow("Tamago") == ("", "Tamago")


class TestSwapTargets:

    @pytest.mark.parametrize("name,subcategory,expected", [
        ("łosoś pieczony", "futomaki", "Futomak Łosoś pieczony"),
        ("Hosomaki ogórek", None, "Hosomaki ogórek"),
        ("futomak vege", None, "futomak vege"),
        ("Tamago", None, "Tamago"),
        ("Tamago", "nigiri", "Nigiri Tamago"),
        ("", "futomaki", ""),
    ])
    def test_with_category_prefix(self, name, subcategory, expected):
        assert with_category_prefix(name, subcategory) == expected

    def test_synonyms(self):
        assert are_ingredient_synonyms("surimi", "paluszek krabowy")
        assert not are_ingredient_synonyms("surimi", "surimi")
        assert not are_ingredient_synonyms("łosoś", "tamago")

    def test_candidates_skip_self_and_synonyms(self):
        row = SetRow(qty=8, category="Hosomaki", ingredient="surimi")
        names = ["Hosomaki surimi", "Paluszek krabowy", "Tamago", "Tamago", "Futomak Łosoś"]
        assert swap_candidates(row, names) == ["Tamago", "Futomak Łosoś"]


class TestSetUpgrade:

    def test_parse_upgrade(self):
        upgrade = parse_set_upgrade(SET_5)
        assert (upgrade.base_pieces, upgrade.extra_pieces, upgrade.total_pieces) == (20, 6, 26)
        assert upgrade.price == 1.0

    def test_no_upgrade_offer(self):
        assert parse_set_upgrade("32 szt: 8x Futomaki tuńczyk surowy") is None
        assert parse_set_upgrade(None) is None
