"""Logical layout of ESG exports, shared by every output format.

Builds the header block, the four metric sections and the historical table
from stored responses. Generators only serialize what is built here, so value
formatting lives in one place.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from esg_api.core.errors import EmptyDatasetError
from esg_api.models.esg import ESGResponse

NOT_AVAILABLE = "N/A"

SUMMARY_TITLE = "ESG Questionnaire Summary"
DETAIL_TITLE = "ESG Response Details"

SECTION_COLORS: dict[str, str] = {
    "environmental": "#22C55E",
    "social": "#3B82F6",
    "governance": "#9333EA",
    "calculated": "#6B7280",
}

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
}


# ── Value formatting ─────────────────────────────────────────────────────────


def _to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def format_number(value: Any) -> str:
    """Thousands separators, at most two decimals, trailing zeros trimmed."""
    num = _to_decimal(value)
    if num is None:
        return NOT_AVAILABLE
    text = f"{num:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_percent(value: Any) -> str:
    num = _to_decimal(value)
    if num is None:
        return NOT_AVAILABLE
    return f"{num:.2f}%"


def format_currency(value: Any, currency: str = "INR") -> str:
    num = _to_decimal(value)
    if num is None:
        return NOT_AVAILABLE
    symbol = _CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{currency} {num:,.2f}"
    return f"{symbol}{num:,.2f}"


def format_intensity(value: Any) -> str:
    """Carbon intensity is the one field shown with six decimals."""
    num = _to_decimal(value)
    if num is None:
        return NOT_AVAILABLE
    return f"{num:.6f}"


def format_bool(value: Any) -> str:
    return "Yes" if value else "No"


def format_date(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, str):
        return value[:10]
    return NOT_AVAILABLE if value is None else str(value)


# ── Layout model ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MetricRow:
    label: str
    value: str
    unit: str = ""


@dataclass
class MetricSection:
    key: str
    title: str
    color: str
    rows: list[MetricRow] = field(default_factory=list)

    headers: tuple[str, str, str] = ("Metric", "Value", "Unit")


@dataclass
class HistoryTable:
    """Rows hold cell values for spreadsheets; display_rows hold formatted text."""

    headers: list[str]
    rows: list[list[Any]]
    display_rows: list[list[str]]


@dataclass
class ESGReport:
    title: str
    header: list[tuple[str, str]]
    sections: list[MetricSection]
    financial_year: str
    generated_at: str
    history: HistoryTable | None = None

    @property
    def is_summary(self) -> bool:
        return self.history is not None


@dataclass(frozen=True)
class Recipient:
    name: str
    email: str


# ── Field definitions ────────────────────────────────────────────────────────

# (attribute, label, unit, kind); kind selects the formatter
_Field = tuple[str, str, str, str]

_SECTION_FIELDS: list[tuple[str, str, list[_Field]]] = [
    ("environmental", "Environmental Metrics", [
        ("total_electricity_consumption", "Total Electricity Consumption", "kWh", "number"),
        ("renewable_electricity_consumption", "Renewable Electricity Consumption", "kWh", "number"),
        ("total_fuel_consumption", "Total Fuel Consumption", "liters", "number"),
        ("carbon_emissions", "Carbon Emissions", "T CO2e", "number"),
    ]),
    ("social", "Social Metrics", [
        ("total_employees", "Total Employees", "", "number"),
        ("female_employees", "Female Employees", "", "number"),
        ("avg_training_hours_per_employee", "Avg Training Hours per Employee", "hours", "number"),
        ("community_investment_spend", "Community Investment Spend", "{currency}", "currency"),
    ]),
    ("governance", "Governance Metrics", [
        ("independent_board_members_percent", "Independent Board Members", "", "percent"),
        ("has_data_privacy_policy", "Data Privacy Policy", "", "bool"),
        ("total_revenue", "Total Revenue", "{currency}", "currency"),
    ]),
    ("calculated", "Calculated Metrics", [
        ("carbon_intensity", "Carbon Intensity", "T CO2e/{currency}", "intensity"),
        ("renewable_electricity_ratio", "Renewable Electricity Ratio", "", "percent"),
        ("diversity_ratio", "Diversity Ratio", "", "percent"),
        ("community_spend_ratio", "Community Spend Ratio", "", "percent"),
    ]),
]

# (header, attribute, kind) in column order
_HISTORY_COLUMNS: list[tuple[str, str, str]] = [
    ("Financial Year", "financial_year", "text"),
    ("Created Date", "created_at", "date"),
    ("Total Electricity (kWh)", "total_electricity_consumption", "number"),
    ("Renewable Electricity (kWh)", "renewable_electricity_consumption", "number"),
    ("Total Fuel (liters)", "total_fuel_consumption", "number"),
    ("Carbon Emissions (T CO2e)", "carbon_emissions", "number"),
    ("Total Employees", "total_employees", "number"),
    ("Female Employees", "female_employees", "number"),
    ("Avg Training Hours", "avg_training_hours_per_employee", "number"),
    ("Community Investment ({currency})", "community_investment_spend", "currency"),
    ("Independent Board Members (%)", "independent_board_members_percent", "percent"),
    ("Data Privacy Policy", "has_data_privacy_policy", "bool"),
    ("Total Revenue ({currency})", "total_revenue", "currency"),
    ("Carbon Intensity (T CO2e/{currency})", "carbon_intensity", "intensity"),
    ("Renewable Electricity Ratio (%)", "renewable_electricity_ratio", "percent"),
    ("Diversity Ratio (%)", "diversity_ratio", "percent"),
    ("Community Spend Ratio (%)", "community_spend_ratio", "percent"),
]


def _format(kind: str, value: Any, currency: str) -> str:
    if kind == "text":
        return NOT_AVAILABLE if value is None else str(value)
    if kind == "date":
        return format_date(value)
    if kind == "currency":
        return format_currency(value, currency)
    if kind == "percent":
        return format_percent(value)
    if kind == "intensity":
        return format_intensity(value)
    if kind == "bool":
        return format_bool(value)
    return format_number(value)


# ── Builders ─────────────────────────────────────────────────────────────────


def build_sections(response: ESGResponse, currency: str = "INR") -> list[MetricSection]:
    """The four metric tables for one response, in fixed order."""
    sections = []
    for key, title, fields in _SECTION_FIELDS:
        section = MetricSection(key=key, title=title, color=SECTION_COLORS[key])
        for attr, label, unit, kind in fields:
            section.rows.append(MetricRow(
                label=label,
                value=_format(kind, getattr(response, attr), currency),
                unit=unit.format(currency=currency),
            ))
        sections.append(section)
    return sections


def build_history(responses: Sequence[ESGResponse], currency: str = "INR") -> HistoryTable:
    """One row per response in the given order; missing values become N/A."""
    headers = [header.format(currency=currency) for header, _, _ in _HISTORY_COLUMNS]
    rows: list[list[Any]] = []
    display_rows: list[list[str]] = []
    for response in responses:
        row: list[Any] = []
        display: list[str] = []
        for _, attr, kind in _HISTORY_COLUMNS:
            value = getattr(response, attr)
            if value is None:
                row.append(NOT_AVAILABLE)
            elif kind in ("date", "bool"):
                row.append(_format(kind, value, currency))
            else:
                row.append(value)
            display.append(_format(kind, value, currency))
        rows.append(row)
        display_rows.append(display)
    return HistoryTable(headers=headers, rows=rows, display_rows=display_rows)


def _header_block(recipient: Recipient, generated_at: str, financial_year: str) -> list[tuple[str, str]]:
    return [
        ("Generated for:", recipient.name),
        ("Email:", recipient.email),
        ("Generated on:", generated_at),
        ("Financial Year:", financial_year),
    ]


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def build_report(
    responses: Sequence[ESGResponse],
    recipient: Recipient,
    *,
    summary: bool,
    currency: str = "INR",
    generated_at: str | None = None,
) -> ESGReport:
    """Lay out an export.

    ``responses`` must be ordered newest first. In summary mode the metric
    tables describe the most recent response and a historical table of all
    responses is attached; otherwise exactly one response is laid out.

    Raises:
        EmptyDatasetError: no responses were given.
    """
    if not responses:
        raise EmptyDatasetError()

    latest = responses[0]
    stamp = generated_at or _now()
    return ESGReport(
        title=SUMMARY_TITLE if summary else DETAIL_TITLE,
        header=_header_block(recipient, stamp, latest.financial_year),
        sections=build_sections(latest, currency),
        financial_year=latest.financial_year,
        generated_at=stamp,
        history=build_history(responses, currency) if summary else None,
    )
