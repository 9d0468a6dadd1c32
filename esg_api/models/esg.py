"""ESG questionnaire response: one immutable submission per row."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, String, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from esg_api.models.base import TimestampedModel

if TYPE_CHECKING:
    from esg_api.models.core import User


class ESGResponse(TimestampedModel):
    __tablename__ = "esg_responses"
    __table_args__ = (
        Index("ix_esg_responses_user_id_created_at", "user_id", "created_at"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    financial_year: Mapped[str] = mapped_column(String(20), nullable=False)  # e.g. "2024"

    # ── Environmental ─────────────────────────────────────────────────────────
    total_electricity_consumption: Mapped[float | None] = mapped_column(Float)  # kWh
    renewable_electricity_consumption: Mapped[float | None] = mapped_column(Float)  # kWh
    total_fuel_consumption: Mapped[float | None] = mapped_column(Float)  # liters
    carbon_emissions: Mapped[float | None] = mapped_column(Float)  # tonnes CO2e

    # ── Social ────────────────────────────────────────────────────────────────
    total_employees: Mapped[float | None] = mapped_column(Float)
    female_employees: Mapped[float | None] = mapped_column(Float)
    avg_training_hours_per_employee: Mapped[float | None] = mapped_column(Float)
    community_investment_spend: Mapped[float | None] = mapped_column(Float)

    # ── Governance ────────────────────────────────────────────────────────────
    independent_board_members_percent: Mapped[float | None] = mapped_column(Float)  # 0–100
    has_data_privacy_policy: Mapped[bool] = mapped_column(
        default=False, server_default=false(), nullable=False
    )
    total_revenue: Mapped[float | None] = mapped_column(Float)

    # ── Derived (stored as computed at submission time) ───────────────────────
    carbon_intensity: Mapped[float | None] = mapped_column(Float)
    renewable_electricity_ratio: Mapped[float | None] = mapped_column(Float)
    diversity_ratio: Mapped[float | None] = mapped_column(Float)
    community_spend_ratio: Mapped[float | None] = mapped_column(Float)

    user: Mapped[User] = relationship(back_populates="responses")
