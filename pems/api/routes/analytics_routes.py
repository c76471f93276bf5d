"""
Routes API cho trang phân tích.
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query

from pems.core.data.models import Metric
from pems.infrastructure.dependencies import (
    get_channel_repository,
    get_chart_service,
    handle_exceptions
)

logger = logging.getLogger(__name__)

router = APIRouter()

async def _channel_or_none(channels, branch: str, firestore_id: str):
    channel = await asyncio.to_thread(channels.get_channel, branch, firestore_id)
    return channel if channel.has_sensor else None

def _no_sensor(firestore_id: str):
    return {"state": "no_sensor", "firestore_id": firestore_id}

@router.get("/{branch}/{firestore_id}/trend")
@handle_exceptions
async def get_trend(
    branch: str,
    firestore_id: str,
    metric: Metric = Query(Metric.AMMONIA),
    days: int = Query(1, ge=1, le=30, description="Số ngày gần nhất"),
    channels=Depends(get_channel_repository),
    charts=Depends(get_chart_service)
):
    """Biểu đồ xu hướng của N ngày gần nhất."""
    channel = await _channel_or_none(channels, branch, firestore_id)
    if channel is None:
        return _no_sensor(firestore_id)
    return {"state": "ok", "chart": await charts.trend(channel, metric, days)}

@router.get("/{branch}/{firestore_id}/hourly")
@handle_exceptions
async def get_hourly_pattern(
    branch: str,
    firestore_id: str,
    metric: Metric = Query(Metric.AMMONIA),
    days: int = Query(1, ge=1, le=30),
    channels=Depends(get_channel_repository),
    charts=Depends(get_chart_service)
):
    """Trung bình theo giờ (UTC) của N ngày gần nhất."""
    channel = await _channel_or_none(channels, branch, firestore_id)
    if channel is None:
        return _no_sensor(firestore_id)
    return {"state": "ok", "chart": await charts.hourly(channel, metric, days)}

@router.get("/{branch}/{firestore_id}/insights")
@handle_exceptions
async def get_insights(
    branch: str,
    firestore_id: str,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    channels=Depends(get_channel_repository),
    charts=Depends(get_chart_service)
):
    """Trung bình theo ngày của một tháng (mặc định tháng hiện tại)."""
    now = datetime.now()
    channel = await _channel_or_none(channels, branch, firestore_id)
    if channel is None:
        return _no_sensor(firestore_id)
    return {"state": "ok", "charts": await charts.insights(channel, year or now.year, month or now.month)}
