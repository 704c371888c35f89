"""
Tests for addon classification and the pricing vocabulary.
"""
import pytest

from sushi_orders.pricing.classifier import classify, parse_row_extra, row_bake_label, row_extra_label
from sushi_orders.pricing.labels import normalize
from sushi_orders.pricing.vocabulary import (
    DEFAULT_VOCABULARY,
    ROW_BAKE_PREFIX,
    SET_UPGRADE_NAME,
    SWAP_FEE_NAME,
    WHOLE_SET_BAKE,
    WHOLE_SET_BAKE_LEGACY,
)


def classified(raw):
    return classify(normalize(raw), DEFAULT_VOCABULARY)


class TestSauces:

    def test_spellings_sum_under_canonical_name(self):
        result = classified(["Sos sojowy ×2", "sos sojowy", "Teriyaki", "SOS SOJOWY (+2 zł)"])
        assert result.sauces == {"Sos sojowy": 4, "Teryiaki": 1}

    def test_catalog_token_named_like_a_sauce_is_a_sauce(self):
        result = classified(["DBMOD|g|o|250|Mango"])
        assert result.sauces == {"Mango": 1}
        assert result.plain == []
        assert result.sauce_tokens["Mango"].price_cents == 250

    def test_regional_sauces_are_recognized(self):
        assert classified(["Sos toffi"]).sauces == {"Sos toffi": 1}


class TestExtras:

    def test_extras_are_binary(self):
        result = classified(["Tempura", "Tempura", "tempura ×3"])
        assert result.extras == ["Tempura"]

    def test_extra_with_price_note(self):
        assert classified(["Płatek sojowy (+3 zł)"]).extras == ["Płatek sojowy"]

    def test_unknown_labels_are_plain(self):
        result = classified(["Imbir", "Wasabi ×2"])
        assert [(a.base, a.qty) for a in result.plain] == [("Imbir", 1), ("Wasabi", 2)]


class TestSetMarkers:

    def test_structural_markers(self):
        row_key = "Futomaki łosoś surowy"
        result = classified([
            WHOLE_SET_BAKE,
            row_bake_label(row_key, DEFAULT_VOCABULARY),
            f"{SWAP_FEE_NAME} ×2",
            SET_UPGRADE_NAME,
            row_extra_label(row_key, "Tempura", DEFAULT_VOCABULARY),
            "Podanie: na ryżu",
        ])
        assert result.whole_set_bake == WHOLE_SET_BAKE
        assert result.baked_rows == [row_key]
        assert result.swap_fee_markers == 2
        assert result.upgraded is True
        assert [(e.row_key, e.extra) for e in result.row_extras] == [(row_key, "Tempura")]
        assert [a.base for a in result.tartar_bases] == ["Podanie: na ryżu"]
        assert result.has_set_markers
        assert result.plain == []

    def test_legacy_whole_set_bake_name(self):
        assert classified([WHOLE_SET_BAKE_LEGACY]).whole_set_bake == WHOLE_SET_BAKE_LEGACY

    def test_repeated_row_bake_counted_once(self):
        label = f"{ROW_BAKE_PREFIX}Futomaki łosoś surowy"
        assert classified([label, label]).baked_rows == ["Futomaki łosoś surowy"]

    def test_token_is_never_a_marker(self):
        result = classified([f"DBMOD|g|o|0|{SWAP_FEE_NAME}"])
        assert result.swap_fee_markers == 0
        assert len(result.plain) == 1

    def test_no_markers(self):
        assert not classified(["Mango"]).has_set_markers


class TestRowExtraLabels:

    def test_label_round_trip(self):
        label = row_extra_label("Hosomaki ogórek", "Tamago", DEFAULT_VOCABULARY)
        parsed = parse_row_extra(label, DEFAULT_VOCABULARY)
        assert (parsed.row_key, parsed.extra, parsed.label) == ("Hosomaki ogórek", "Tamago", label)

    @pytest.mark.parametrize("text", [
        "Dodatek do rolki: Hosomaki ogórek",
        "Dodatek do rolki:  — Tamago",
        "Tamago",
    ])
    def test_incomplete_labels(self, text):
        assert parse_row_extra(text, DEFAULT_VOCABULARY) is None


class TestVocabulary:

    def test_canonical_sauce_ignores_case_and_diacritics(self):
        assert DEFAULT_VOCABULARY.canonical_sauce("zurawina") == "Żurawina"
        assert DEFAULT_VOCABULARY.canonical_sauce("spicy-mayo") == "Spicy Mayo"

    def test_aliases(self):
        assert DEFAULT_VOCABULARY.canonical_sauce("Teriyaki sauce") == "Teryiaki"

    def test_unknown_sauce(self):
        assert DEFAULT_VOCABULARY.canonical_sauce("Sos czosnkowy") is None
        assert DEFAULT_VOCABULARY.canonical_sauce("") is None

    def test_extra_lookup(self):
        assert DEFAULT_VOCABULARY.extra_name("tamago") == "Tamago"
        assert DEFAULT_VOCABULARY.extra_name("Tamago nigiri") is None
        assert DEFAULT_VOCABULARY.extra_in_text("Hosomaki — tamago") == "Tamago"

    def test_with_prices_returns_a_copy(self):
        vocab = DEFAULT_VOCABULARY.with_prices(sauce_price=2.5, swap_fee_price=4.0)
        assert vocab.sauce_price == 2.5
        assert vocab.swap_fee_price == 4.0
        assert DEFAULT_VOCABULARY.sauce_price == 2.0
        assert vocab.base_sauces == DEFAULT_VOCABULARY.base_sauces

    def test_priority_lists_base_sauces_first(self):
        priority = DEFAULT_VOCABULARY.sauce_priority
        assert priority[0] == "Sos sojowy"
        assert priority.index("Sos czekoladowy") > priority.index("Żurawina")
