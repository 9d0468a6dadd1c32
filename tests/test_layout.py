"""Tests for export layout and value formatting."""

import uuid
from datetime import datetime, timezone

import pytest

from esg_api.core.errors import EmptyDatasetError
from esg_api.models.esg import ESGResponse
from esg_api.modules.esg.calculator import calculate_metrics
from esg_api.modules.reporting.layout import (
    DETAIL_TITLE,
    NOT_AVAILABLE,
    SECTION_COLORS,
    SUMMARY_TITLE,
    Recipient,
    build_history,
    build_report,
    build_sections,
    format_bool,
    format_currency,
    format_date,
    format_intensity,
    format_number,
    format_percent,
)
from tests.conftest import SAMPLE_RAW

RECIPIENT = Recipient(name="Asha Rao", email="asha@example.com")


def _response(financial_year: str = "2024", day: int = 1, **overrides) -> ESGResponse:
    raw = {**SAMPLE_RAW, **overrides}
    return ESGResponse(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        financial_year=financial_year,
        created_at=datetime(2024, 4, day, tzinfo=timezone.utc),
        **raw,
        **calculate_metrics(raw).as_dict(),
    )


def _row(section, label):
    return next(r for r in section.rows if r.label == label)


class TestFormatters:
    def test_number_thousands_and_trimmed_decimals(self):
        assert format_number(1234567) == "1,234,567"
        assert format_number(12.5) == "12.5"
        assert format_number(0) == "0"

    def test_percent_two_decimals(self):
        assert format_percent(25) == "25.00%"
        assert format_percent(33.33333) == "33.33%"

    def test_currency_symbol(self):
        assert format_currency(500000, "INR") == "₹500,000.00"
        assert format_currency(10, "USD") == "$10.00"
        assert format_currency(10, "CHF") == "CHF 10.00"

    def test_intensity_six_decimals(self):
        assert format_intensity(0.0001) == "0.000100"

    def test_bool(self):
        assert format_bool(True) == "Yes"
        assert format_bool(False) == "No"

    def test_date(self):
        assert format_date(datetime(2024, 4, 1, 9, 30)) == "2024-04-01"

    @pytest.mark.parametrize(
        "fn", [format_number, format_percent, format_currency, format_intensity, format_date]
    )
    def test_missing_value_is_not_available(self, fn):
        assert fn(None) == NOT_AVAILABLE


class TestSections:
    def test_fixed_section_order_and_colors(self):
        sections = build_sections(_response())
        assert [s.key for s in sections] == ["environmental", "social", "governance", "calculated"]
        assert [s.color for s in sections] == [SECTION_COLORS[s.key] for s in sections]

    def test_values_are_formatted(self):
        environmental, social, governance, calculated = build_sections(_response())
        assert _row(environmental, "Total Electricity Consumption").value == "1,000"
        assert _row(environmental, "Total Electricity Consumption").unit == "kWh"
        assert _row(social, "Community Investment Spend").value == "₹5,000.00"
        assert _row(governance, "Data Privacy Policy").value == "Yes"
        assert _row(governance, "Independent Board Members").value == "60.00%"
        assert _row(calculated, "Carbon Intensity").value == "0.000100"
        assert _row(calculated, "Carbon Intensity").unit == "T CO2e/INR"
        assert _row(calculated, "Renewable Electricity Ratio").value == "25.00%"

    def test_missing_raw_value_renders_not_available(self):
        environmental = build_sections(_response(total_fuel_consumption=None))[0]
        assert _row(environmental, "Total Fuel Consumption").value == NOT_AVAILABLE

    def test_recorded_zero_is_not_missing(self):
        environmental = build_sections(_response(total_fuel_consumption=0))[0]
        assert _row(environmental, "Total Fuel Consumption").value == "0"

    def test_privacy_policy_no(self):
        governance = build_sections(_response(has_data_privacy_policy=False))[2]
        assert _row(governance, "Data Privacy Policy").value == "No"


class TestHistory:
    def test_one_row_per_response_in_given_order(self):
        history = build_history([_response("2024", day=3), _response("2023", day=2)])
        assert len(history.headers) == 17
        assert [row[0] for row in history.rows] == ["2024", "2023"]
        assert history.display_rows[0][1] == "2024-04-03"

    def test_raw_rows_keep_numbers(self):
        history = build_history([_response(total_fuel_consumption=None)])
        row = history.rows[0]
        assert row[2] == 1000.0
        assert row[4] == NOT_AVAILABLE
        assert row[11] == "Yes"

    def test_currency_in_headers(self):
        history = build_history([_response()], currency="USD")
        assert "Total Revenue (USD)" in history.headers


class TestBuildReport:
    def test_empty_dataset_raises(self):
        with pytest.raises(EmptyDatasetError):
            build_report([], RECIPIENT, summary=True)

    def test_summary_uses_latest_and_attaches_history(self):
        responses = [_response("2024", day=3), _response("2023", day=2)]
        report = build_report(responses, RECIPIENT, summary=True, generated_at="2024-04-05 10:00 UTC")
        assert report.title == SUMMARY_TITLE
        assert report.is_summary
        assert report.financial_year == "2024"
        assert len(report.history.rows) == 2
        assert report.header == [
            ("Generated for:", "Asha Rao"),
            ("Email:", "asha@example.com"),
            ("Generated on:", "2024-04-05 10:00 UTC"),
            ("Financial Year:", "2024"),
        ]

    def test_single_response_has_no_history(self):
        report = build_report([_response("2022")], RECIPIENT, summary=False)
        assert report.title == DETAIL_TITLE
        assert report.history is None
        assert report.financial_year == "2022"
