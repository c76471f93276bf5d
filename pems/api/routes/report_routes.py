"""
Routes API để tạo báo cáo PDF.
"""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from pems.core.reports import ReportTableData
from pems.infrastructure.dependencies import (
    get_channel_repository,
    get_report_builder,
    handle_exceptions
)

logger = logging.getLogger(__name__)

router = APIRouter()

class ReportRequest(BaseModel):
    branch: str
    # Bỏ trống để tạo báo cáo cho cả chi nhánh
    firestore_id: Optional[str] = None
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    table: ReportTableData = Field(default_factory=ReportTableData)

@router.post("")
@handle_exceptions
async def generate_report(
    request: ReportRequest,
    channels=Depends(get_channel_repository),
    builder=Depends(get_report_builder)
):
    """Tạo báo cáo tháng dạng PDF."""
    if request.firestore_id:
        selected = [await asyncio.to_thread(channels.get_channel, request.branch, request.firestore_id)]
    else:
        selected = await asyncio.to_thread(channels.list_channels, request.branch)

    filename, pdf = await builder.build(selected, request.year, request.month, request.table)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
