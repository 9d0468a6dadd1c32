"""ESG questionnaire responses API router."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from esg_api.auth.dependencies import get_current_user
from esg_api.core.database import get_db
from esg_api.modules.esg import service
from esg_api.modules.esg.calculator import calculate_metrics
from esg_api.modules.esg.schemas import (
    DeleteResponseResult,
    DerivedMetricsResponse,
    ESGResponseCreateRequest,
    ESGResponseOut,
    MetricsPreviewRequest,
)
from esg_api.schemas.auth import CurrentUser

router = APIRouter(tags=["esg"])

# Shortest string accepted as a response id on delete
_MIN_ID_LENGTH = 10


# ── Responses ─────────────────────────────────────────────────────────────────


@router.get("/responses", response_model=list[ESGResponseOut])
async def list_responses(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All of the caller's responses, newest first."""
    return await service.list_responses(db, current_user.user_id)


@router.post(
    "/responses",
    response_model=ESGResponseOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_response(
    body: ESGResponseCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    response = await service.create_response(db, current_user.user_id, body)
    await db.commit()
    return response


@router.get("/responses/{response_id}", response_model=ESGResponseOut)
async def get_response(
    response_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await service.get_response(db, response_id, current_user.user_id)


@router.delete("/responses/{response_id}", response_model=DeleteResponseResult)
async def delete_response(
    response_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if len(response_id.strip()) < _MIN_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid response ID",
        )
    await service.delete_response(db, response_id, current_user.user_id)
    await db.commit()
    return DeleteResponseResult(message="Response deleted successfully")


# ── Live preview ──────────────────────────────────────────────────────────────


@router.post("/metrics/preview", response_model=DerivedMetricsResponse)
async def preview_metrics(
    body: MetricsPreviewRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Derived ratios for unsaved questionnaire input. Nothing is stored."""
    return DerivedMetricsResponse(**calculate_metrics(body.model_dump()).as_dict())
