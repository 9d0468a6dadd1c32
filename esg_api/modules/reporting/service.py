"""Reporting service: load the caller's responses and render them as a document."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from esg_api.core.config import settings
from esg_api.core.errors import ESGError, ExportRenderError
from esg_api.modules.esg import service as esg_service
from esg_api.modules.reporting.generators import (
    BaseReportGenerator,
    PDFGenerator,
    XLSXGenerator,
)
from esg_api.modules.reporting.layout import Recipient, build_report
from esg_api.modules.reporting.schemas import ExportFile, ExportFormat
from esg_api.schemas.auth import CurrentUser

logger = structlog.get_logger()

GENERATORS: dict[ExportFormat, type[BaseReportGenerator]] = {
    ExportFormat.PDF: PDFGenerator,
    ExportFormat.EXCEL: XLSXGenerator,
}


def _filename(extension: str, response_id: str | None) -> str:
    if response_id is None:
        return f"esg-questionnaire-summary.{extension}"
    return f"esg-response-{response_id}.{extension}"


async def export_responses(
    db: AsyncSession,
    current_user: CurrentUser,
    fmt: ExportFormat,
    response_id: str | None = None,
) -> ExportFile:
    """Render one response, or a summary of all of the caller's responses.

    Raises:
        ResponseNotFoundError: response_id is unknown or not owned by the caller.
        EmptyDatasetError: summary requested but the caller has no responses.
        ExportRenderError: the document library failed.
    """
    if response_id is None:
        responses = await esg_service.list_responses(db, current_user.user_id)
    else:
        responses = [await esg_service.get_response(db, response_id, current_user.user_id)]

    report = build_report(
        responses,
        Recipient(name=current_user.full_name, email=current_user.email),
        summary=response_id is None,
        currency=settings.REPORT_CURRENCY,
    )

    generator = GENERATORS[fmt](brand_color=settings.REPORT_BRAND_COLOR)
    try:
        # Rendering is CPU-bound and synchronous; keep it off the event loop
        content, content_type = await run_in_threadpool(generator.generate, report)
    except ESGError:
        raise
    except Exception as exc:
        logger.error(
            "export_render_failed",
            format=fmt.value,
            user_id=str(current_user.user_id),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise ExportRenderError(f"Failed to render {fmt.value} export") from exc

    filename = _filename(generator.EXTENSION, response_id)
    logger.info(
        "export_generated",
        format=fmt.value,
        user_id=str(current_user.user_id),
        responses=len(responses),
        size_bytes=len(content),
        filename=filename,
    )
    return ExportFile(content=content, content_type=content_type, filename=filename)
