"""Unit tests for request and breakdown schemas."""

import pytest
from pydantic import ValidationError

from withholdcheck.sdk.schemas import (
    CalculationReport,
    CalculationRequest,
    FilingStatus,
    TaxBreakdown,
    TaxCategory,
)


def make_request(**overrides):
    params = {
        "salary": 65000,
        "state": "New York",
        "address": "35 Hudson Yards",
        "city": "New York",
        "zipcode": "10001",
        "filingStatus": "SINGLE",
    }
    params.update(overrides)
    return CalculationRequest(**params)


class TestFilingStatus:
    """Tests for FilingStatus.parse()."""

    @pytest.mark.parametrize("text,expected", [
        ("SINGLE", FilingStatus.SINGLE),
        ("single", FilingStatus.SINGLE),
        ("Married Filing Jointly", FilingStatus.MARRIED),
        ("married-filing-separately", FilingStatus.MARRIED_SEPARATELY),
        ("head of household", FilingStatus.HEAD_OF_HOUSEHOLD),
        ("HOH", FilingStatus.HEAD_OF_HOUSEHOLD),
        ("2", FilingStatus.MARRIED),
        ("4", FilingStatus.NONRESIDENT_ALIEN),
    ])
    def test_parse(self, text, expected):
        assert FilingStatus.parse(text) is expected

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown filing status"):
            FilingStatus.parse("widowed")

    def test_state_code(self):
        assert FilingStatus.MARRIED.state_code == "M"
        assert FilingStatus.HEAD_OF_HOUSEHOLD.state_code == "S"


class TestCalculationRequest:
    """Tests for request validation."""

    def test_valid_request(self):
        request = make_request(filingStatus="married")

        assert request.filing_status is FilingStatus.MARRIED
        assert request.withholding == 0
        assert request.state_slug == "new-york"

    @pytest.mark.parametrize("withholding", [None, ""])
    def test_blank_withholding_defaults_to_zero(self, withholding):
        assert make_request(withholding=withholding).withholding == 0

    def test_populate_by_field_name(self):
        request = CalculationRequest(
            salary=50000, state="Texas", address="1 Main St", city="Austin",
            zipcode="73301-0001", filing_status=FilingStatus.SINGLE,
        )
        assert request.zipcode == "73301-0001"

    @pytest.mark.parametrize("field,value", [
        ("salary", 0),
        ("salary", -5),
        ("withholding", -1),
        ("zipcode", "1000"),
        ("zipcode", "ABCDE"),
        ("state", "   "),
        ("filingStatus", "widowed"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            make_request(**{field: value})

    def test_missing_fields_reported_together(self):
        with pytest.raises(ValidationError) as exc_info:
            CalculationRequest(salary=65000)

        missing = {e["loc"][0] for e in exc_info.value.errors()}
        assert missing == {"state", "address", "city", "zipcode", "filingStatus"}

    def test_extra_fields_ignored(self):
        assert make_request(bonus=1000).salary == 65000


class TestTaxBreakdown:
    """Tests for TaxBreakdown helpers."""

    def test_combined_sums_split_parts(self):
        breakdown = TaxBreakdown(amounts={
            TaxCategory.MEDICARE: 942.5,
            TaxCategory.SOCIAL_SECURITY: 4030,
        })
        assert breakdown.is_split(TaxCategory.FICA)
        assert breakdown.combined(TaxCategory.FICA) == 4972.5

    def test_combined_none_when_parts_incomplete(self):
        breakdown = TaxBreakdown(amounts={TaxCategory.MEDICARE: 942.5})
        assert breakdown.combined(TaxCategory.FICA) is None

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="Negative"):
            TaxBreakdown(amounts={TaxCategory.LOCAL_TAX: -1})

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_amount_rejected(self, value):
        with pytest.raises(ValidationError, match="Non-finite"):
            TaxBreakdown(amounts={TaxCategory.NET_PAY: value})

    def test_labels(self):
        assert TaxCategory.STATE_WITHHOLDING.label == "State Tax Withholding"
        assert all(c.label for c in TaxCategory)


class TestCalculationReport:
    """Tests for CalculationReport truthiness."""

    def test_failure_report_is_falsy(self):
        report = CalculationReport(ok=False, reason="mismatch")

        assert not report
        assert report.breakdown is None
        assert report.attempt_count == 0
