"""Export API router: PDF and Excel downloads of ESG responses."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from esg_api.auth.dependencies import get_current_user
from esg_api.core.database import get_db
from esg_api.modules.reporting import service
from esg_api.modules.reporting.schemas import ExportFile, ExportFormat
from esg_api.schemas.auth import CurrentUser

router = APIRouter(prefix="/export", tags=["export"])


# ── Helpers ─────────────────────────────────────────────────────────────────


def _normalize_response_id(response_id: str | None) -> str | None:
    if response_id is None:
        return None
    response_id = response_id.strip()
    if not response_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="responseId is required",
        )
    return response_id


def _attachment(export: ExportFile) -> Response:
    return Response(
        content=export.content,
        media_type=export.content_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


# ── Endpoints ───────────────────────────────────────────────────────────────


@router.get("/pdf")
async def export_pdf(
    response_id: str | None = Query(None, alias="responseId"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download a PDF of one response, or a summary of all responses."""
    export = await service.export_responses(
        db, current_user, ExportFormat.PDF, _normalize_response_id(response_id)
    )
    return _attachment(export)


@router.get("/excel")
async def export_excel(
    response_id: str | None = Query(None, alias="responseId"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download an Excel workbook of one response, or a summary of all responses."""
    export = await service.export_responses(
        db, current_user, ExportFormat.EXCEL, _normalize_response_id(response_id)
    )
    return _attachment(export)
