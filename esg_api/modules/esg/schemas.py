"""ESG questionnaire: Pydantic schemas.

Wire format is camelCase (``financialYear``, ``totalRevenue``...); snake_case
field names are accepted on input too.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        # Quantities are finite; 1e400 parses to inf and must not pass ge=0
        allow_inf_nan=False,
    )


# Printable text only: control characters cannot be written to xlsx
PRINTABLE_TEXT = r"^[^\x00-\x1f\x7f]+$"


# ── Raw questionnaire fields ──────────────────────────────────────────────────


class ESGRawFields(_CamelModel):
    # Environmental
    total_electricity_consumption: float | None = Field(default=None, ge=0)  # kWh
    renewable_electricity_consumption: float | None = Field(default=None, ge=0)  # kWh
    total_fuel_consumption: float | None = Field(default=None, ge=0)  # liters
    carbon_emissions: float | None = Field(default=None, ge=0)  # tonnes CO2e

    # Social
    total_employees: float | None = Field(default=None, ge=0)
    female_employees: float | None = Field(default=None, ge=0)
    avg_training_hours_per_employee: float | None = Field(default=None, ge=0)
    community_investment_spend: float | None = Field(default=None, ge=0)

    # Governance
    independent_board_members_percent: float | None = Field(default=None, ge=0, le=100)
    has_data_privacy_policy: bool = False
    total_revenue: float | None = Field(default=None, ge=0)


# ── Request ───────────────────────────────────────────────────────────────────


class ESGResponseCreateRequest(ESGRawFields):
    financial_year: str = Field(min_length=1, max_length=20, pattern=PRINTABLE_TEXT)  # "2024"

    # Derived, computed server-side when omitted
    carbon_intensity: float | None = Field(default=None, ge=0)
    renewable_electricity_ratio: float | None = Field(default=None, ge=0)
    diversity_ratio: float | None = Field(default=None, ge=0)
    community_spend_ratio: float | None = Field(default=None, ge=0)

    @field_validator("financial_year", mode="before")
    @classmethod
    def _strip_year(cls, v):
        return v.strip() if isinstance(v, str) else v


class MetricsPreviewRequest(ESGRawFields):
    pass


# ── Responses ─────────────────────────────────────────────────────────────────


class DerivedMetricsResponse(_CamelModel):
    carbon_intensity: float
    renewable_electricity_ratio: float
    diversity_ratio: float
    community_spend_ratio: float


class ESGResponseOut(ESGRawFields):
    id: uuid.UUID
    user_id: uuid.UUID
    financial_year: str

    carbon_intensity: float | None
    renewable_electricity_ratio: float | None
    diversity_ratio: float | None
    community_spend_ratio: float | None

    created_at: datetime


class DeleteResponseResult(BaseModel):
    message: str
