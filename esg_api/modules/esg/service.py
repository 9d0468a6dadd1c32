"""ESG response store: create, list, fetch and delete responses scoped to their owner."""

from __future__ import annotations

import math
import uuid

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from esg_api.core.errors import (
    InvalidResponseError,
    RelatedDataConflictError,
    ResponseNotFoundError,
    StorageError,
)
from esg_api.models.esg import ESGResponse
from esg_api.modules.esg.calculator import DERIVED_FIELDS, calculate_metrics
from esg_api.modules.esg.schemas import ESGResponseCreateRequest

logger = structlog.get_logger()

# Relative tolerance when comparing client-supplied derived metrics to ours
_DERIVED_TOLERANCE = 1e-6


# ── Helpers ───────────────────────────────────────────────────────────────────


def _check_invariants(body: ESGResponseCreateRequest) -> None:
    errors: list[dict[str, str]] = []

    if (
        body.female_employees is not None
        and body.total_employees is not None
        and body.female_employees > body.total_employees
    ):
        errors.append({
            "field": "femaleEmployees",
            "message": "Female employees cannot exceed total employees",
        })
    if (
        body.renewable_electricity_consumption is not None
        and body.total_electricity_consumption is not None
        and body.renewable_electricity_consumption > body.total_electricity_consumption
    ):
        errors.append({
            "field": "renewableElectricityConsumption",
            "message": "Renewable electricity cannot exceed total electricity consumption",
        })

    if errors:
        raise InvalidResponseError(errors[0]["message"], detail=errors)


def _resolve_derived(body: ESGResponseCreateRequest) -> dict[str, float | None]:
    """Keep supplied derived values; fill the missing ones from the calculator."""
    computed = calculate_metrics(body.model_dump()).as_dict()
    resolved: dict[str, float | None] = {}
    for name in DERIVED_FIELDS:
        supplied = getattr(body, name)
        if supplied is None:
            resolved[name] = computed[name]
            continue
        if not math.isclose(supplied, computed[name], rel_tol=_DERIVED_TOLERANCE, abs_tol=1e-9):
            logger.warning(
                "derived_metric_mismatch",
                metric=name,
                supplied=supplied,
                computed=computed[name],
            )
        resolved[name] = supplied
    return resolved


def _parse_id(response_id: str | uuid.UUID) -> uuid.UUID:
    if isinstance(response_id, uuid.UUID):
        return response_id
    try:
        return uuid.UUID(response_id)
    except (ValueError, AttributeError, TypeError) as exc:
        # A malformed id cannot name any row; report it like any missing one
        raise ResponseNotFoundError() from exc


# ── Create ────────────────────────────────────────────────────────────────────


async def create_response(
    db: AsyncSession,
    user_id: uuid.UUID,
    body: ESGResponseCreateRequest,
) -> ESGResponse:
    """Validate invariants, resolve derived metrics and persist one response."""
    _check_invariants(body)

    fields = body.model_dump(exclude=set(DERIVED_FIELDS))
    fields.update(_resolve_derived(body))

    response = ESGResponse(user_id=user_id, **fields)
    db.add(response)
    try:
        await db.flush()
        await db.refresh(response)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to save ESG response") from exc

    logger.info(
        "esg_response_created",
        response_id=str(response.id),
        user_id=str(user_id),
        financial_year=response.financial_year,
    )
    return response


# ── Read ──────────────────────────────────────────────────────────────────────


async def list_responses(db: AsyncSession, user_id: uuid.UUID) -> list[ESGResponse]:
    """All responses owned by the user, newest first."""
    stmt = (
        select(ESGResponse)
        .where(ESGResponse.user_id == user_id)
        .order_by(ESGResponse.created_at.desc(), ESGResponse.id.desc())
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load ESG responses") from exc
    return list(result.scalars().all())


async def get_response(
    db: AsyncSession,
    response_id: str | uuid.UUID,
    user_id: uuid.UUID,
) -> ESGResponse:
    """Fetch one response; foreign-owned and missing ids are indistinguishable."""
    rid = _parse_id(response_id)
    stmt = select(ESGResponse).where(
        ESGResponse.id == rid,
        ESGResponse.user_id == user_id,
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load ESG response") from exc
    response = result.scalar_one_or_none()
    if response is None:
        raise ResponseNotFoundError()
    return response


# ── Delete ────────────────────────────────────────────────────────────────────


async def delete_response(
    db: AsyncSession,
    response_id: str | uuid.UUID,
    user_id: uuid.UUID,
) -> None:
    rid = _parse_id(response_id)
    stmt = delete(ESGResponse).where(
        ESGResponse.id == rid,
        ESGResponse.user_id == user_id,
    )
    try:
        result = await db.execute(stmt)
        await db.flush()
    except IntegrityError as exc:
        logger.warning("esg_response_delete_blocked", response_id=str(rid), error=str(exc.orig))
        raise RelatedDataConflictError() from exc
    except SQLAlchemyError as exc:
        raise StorageError("Failed to delete ESG response") from exc

    if result.rowcount == 0:
        raise ResponseNotFoundError()

    logger.info("esg_response_deleted", response_id=str(rid), user_id=str(user_id))
