"""Unit tests for label normalization.

Covers amount parsing, label-variant priority, the "not found" zero and
vocabulary loading / resolution.
"""

import json

import pytest

from withholdcheck.sdk.errors import ParseError, VocabularyError
from withholdcheck.sdk.normalize import (
    load_vocabulary,
    normalize,
    parse_amount,
    source_vocabulary,
)
from withholdcheck.sdk.schemas import TaxCategory


VOCAB = {
    TaxCategory.FEDERAL_WITHHOLDING: ["Federal Withholding", "Federal Income Tax"],
    TaxCategory.STATE_WITHHOLDING: ["State Tax Withholding"],
    TaxCategory.LOCAL_TAX: ["City Tax", "Local Tax"],
}


class TestParseAmount:
    """Tests for parse_amount()."""

    @pytest.mark.parametrize("text,expected", [
        ("$1,234.56", 1234.56),
        ("  $ 9,000.00 ", 9000.0),
        ("4030", 4030.0),
        ("($50.00)", -50.0),
        ("-$12.30", -12.3),
        ("$0.00", 0.0),
    ])
    def test_parses_display_text(self, text, expected):
        assert parse_amount(text) == pytest.approx(expected)

    def test_numbers_pass_through(self):
        assert parse_amount(942.5) == 942.5
        assert parse_amount(100) == 100.0

    @pytest.mark.parametrize("text", [
        "", "   ", "$", "N/A", "--", None, True,
        "$NaN", "nan", "Infinity", "-inf", "1_000", "1e3",
        float("nan"), float("inf"),
    ])
    def test_non_numeric_raises(self, text):
        with pytest.raises(ParseError):
            parse_amount(text)

    def test_nan_row_is_missing_not_nan(self):
        """A calculator rendering "$NaN" yields the not-found zero."""
        breakdown = normalize([("Federal Withholding", "$NaN")], VOCAB)

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 0.0
        assert TaxCategory.FEDERAL_WITHHOLDING in breakdown.missing

    def test_parse_error_is_value_error(self):
        """Callers catching ValueError also catch ParseError."""
        with pytest.raises(ValueError):
            parse_amount("abc")


class TestNormalize:
    """Tests for normalize()."""

    def test_maps_labels_to_categories(self):
        rows = [
            ("Federal Withholding", "$9,000.00"),
            ("State Tax Withholding", "$3,500.00"),
            ("City Tax", "$0.00"),
        ]
        breakdown = normalize(rows, VOCAB, source="paycheckcity")

        assert breakdown.source == "paycheckcity"
        assert breakdown.amounts == {
            TaxCategory.FEDERAL_WITHHOLDING: 9000.0,
            TaxCategory.STATE_WITHHOLDING: 3500.0,
            TaxCategory.LOCAL_TAX: 0.0,
        }
        assert breakdown.missing == set()

    def test_unmatched_category_is_zero_and_missing(self):
        """A category with no matching label is 0 and flagged as not found."""
        breakdown = normalize([("Federal Withholding", "9000")], VOCAB)

        assert breakdown.get(TaxCategory.STATE_WITHHOLDING) == 0.0
        assert breakdown.get(TaxCategory.LOCAL_TAX) == 0.0
        assert breakdown.missing == {TaxCategory.STATE_WITHHOLDING, TaxCategory.LOCAL_TAX}

    def test_reported_zero_is_not_missing(self):
        breakdown = normalize([("City Tax", "$0.00")], VOCAB)

        assert breakdown.get(TaxCategory.LOCAL_TAX) == 0.0
        assert TaxCategory.LOCAL_TAX not in breakdown.missing

    def test_earlier_variant_takes_priority(self):
        """Variant order decides, not row order."""
        rows = [
            ("Federal Income Tax", "8000"),
            ("Federal Withholding", "9000"),
        ]
        breakdown = normalize(rows, VOCAB)

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 9000.0

    def test_falls_back_to_later_variant(self):
        breakdown = normalize([("Federal Income Tax", "8000")], VOCAB)

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 8000.0

    def test_first_row_wins_for_duplicate_labels(self):
        rows = [
            ("Federal Withholding", "9000"),
            ("Federal Withholding", "1"),
        ]
        breakdown = normalize(rows, VOCAB)

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 9000.0

    def test_match_is_exact_on_trimmed_text(self):
        """Whitespace is trimmed but case is significant."""
        rows = [
            ("  Federal Withholding  ", "9000"),
            ("state tax withholding", "3500"),
        ]
        breakdown = normalize(rows, VOCAB)

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 9000.0
        assert TaxCategory.STATE_WITHHOLDING in breakdown.missing

    def test_unparseable_value_treated_as_missing(self, caplog):
        breakdown = normalize([("Federal Withholding", "pending")], VOCAB, source="smartasset")

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 0.0
        assert TaxCategory.FEDERAL_WITHHOLDING in breakdown.missing
        assert "unparseable" in caplog.text

    def test_parenthesised_amount_stored_as_magnitude(self):
        breakdown = normalize([("Federal Withholding", "($9,000.00)")], VOCAB)

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 9000.0

    def test_accepts_mapping(self):
        breakdown = normalize({"Federal Withholding": 9000, "Other": "12"}, VOCAB)

        assert breakdown.get(TaxCategory.FEDERAL_WITHHOLDING) == 9000.0
        assert len(breakdown.amounts) == len(VOCAB)


class TestVocabulary:
    """Tests for vocabulary loading and resolution."""

    def test_packaged_vocabulary_has_both_sources(self, isolated_config):
        vocab = load_vocabulary()

        assert {"paycheckcity", "smartasset"} <= set(vocab.sources)
        assert TaxCategory.FICA in vocab.sources["smartasset"]
        assert TaxCategory.MEDICARE in vocab.sources["paycheckcity"]

    def test_packaged_vocabulary_normalizes_paycheckcity_rows(self, isolated_config):
        vocab = source_vocabulary(load_vocabulary(), "paycheckcity")
        rows = [
            ("Take home pay (net pay)", "$47,527.50"),
            ("Federal Withholding", "$9,000.00"),
            ("Medicare", "$942.50"),
            ("Social Security", "$4,030.00"),
        ]
        breakdown = normalize(rows, vocab, source="paycheckcity")

        assert breakdown.get(TaxCategory.NET_PAY) == 47527.5
        assert breakdown.is_split(TaxCategory.FICA)

    def test_unknown_source_raises(self, isolated_config):
        with pytest.raises(VocabularyError, match="Known sources"):
            source_vocabulary(load_vocabulary(), "nosuchsite")

    def test_config_dir_vocabulary_overrides_default(self, isolated_config):
        (isolated_config / "vocabulary.yaml").write_text(
            "sources:\n"
            "  mysite:\n"
            "    federal_withholding: [Fed]\n"
        )
        vocab = load_vocabulary()

        assert list(vocab.sources) == ["mysite"]

    def test_settings_vocabulary_path_wins(self, isolated_config, tmp_path):
        custom = tmp_path / "custom.yaml"
        custom.write_text("sources:\n  other:\n    net_pay: [Net]\n")
        (isolated_config / "settings.json").write_text(json.dumps({"vocabulary": str(custom)}))

        vocab = load_vocabulary()

        assert list(vocab.sources) == ["other"]

    def test_unknown_category_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("sources:\n  site:\n    bonus_tax: [Bonus]\n")

        with pytest.raises(VocabularyError, match="Invalid vocabulary"):
            load_vocabulary(path)

    def test_blank_variant_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("sources:\n  site:\n    net_pay: ['  ']\n")

        with pytest.raises(VocabularyError):
            load_vocabulary(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(VocabularyError, match="not found"):
            load_vocabulary(tmp_path / "absent.yaml")
