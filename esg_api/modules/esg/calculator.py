"""Pure deterministic ESG ratio calculators. No DB calls.

A zero (or missing) denominator yields 0 rather than an error, NaN or infinity.
"""

from dataclasses import asdict, dataclass
from typing import Any


def carbon_intensity(carbon_emissions: float, total_revenue: float) -> float:
    """Tonnes CO2e per unit of revenue."""
    if total_revenue > 0:
        return carbon_emissions / total_revenue
    return 0


def renewable_electricity_ratio(renewable: float, total: float) -> float:
    """Renewable share of electricity consumption, in percent."""
    if total > 0:
        return (renewable / total) * 100
    return 0


def diversity_ratio(female: float, total_employees: float) -> float:
    """Female share of the workforce, in percent."""
    if total_employees > 0:
        return (female / total_employees) * 100
    return 0


def community_spend_ratio(community_spend: float, total_revenue: float) -> float:
    """Community investment as a percentage of revenue."""
    if total_revenue > 0:
        return (community_spend / total_revenue) * 100
    return 0


@dataclass(frozen=True)
class DerivedMetrics:
    carbon_intensity: float
    renewable_electricity_ratio: float
    diversity_ratio: float
    community_spend_ratio: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


DERIVED_FIELDS: tuple[str, ...] = (
    "carbon_intensity",
    "renewable_electricity_ratio",
    "diversity_ratio",
    "community_spend_ratio",
)


def _num(raw: dict[str, Any], key: str) -> float:
    value = raw.get(key)
    return float(value) if value is not None else 0.0


def calculate_metrics(raw: dict[str, Any]) -> DerivedMetrics:
    """All four derived ratios from snake_case raw fields; missing inputs count as 0."""
    revenue = _num(raw, "total_revenue")
    return DerivedMetrics(
        carbon_intensity=carbon_intensity(_num(raw, "carbon_emissions"), revenue),
        renewable_electricity_ratio=renewable_electricity_ratio(
            _num(raw, "renewable_electricity_consumption"),
            _num(raw, "total_electricity_consumption"),
        ),
        diversity_ratio=diversity_ratio(
            _num(raw, "female_employees"), _num(raw, "total_employees")
        ),
        community_spend_ratio=community_spend_ratio(
            _num(raw, "community_investment_spend"), revenue
        ),
    )
