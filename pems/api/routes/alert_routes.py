"""
Routes API cho cảnh báo và khuyến nghị xử lý.
"""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from pems.core.analytics.advice import prescriptive_advice
from pems.infrastructure.database.alert_repository import alert_id
from pems.infrastructure.dependencies import get_alert_repository, handle_exceptions

logger = logging.getLogger(__name__)

router = APIRouter()

class DeleteAlertRequest(BaseModel):
    branch: str
    firestore_id: str
    alert_id: str

def _serialize(alert) -> dict:
    data = alert.model_dump(mode="json", exclude={"original_payload"})
    data["id"] = alert_id(alert.original_payload)
    return data

@router.get("")
@handle_exceptions
async def list_alerts(
    branch: Optional[str] = Query(None),
    alerts=Depends(get_alert_repository)
):
    """Lấy tất cả cảnh báo, mới nhất trước."""
    result = await asyncio.to_thread(alerts.list_alerts, branch)
    return {"count": len(result), "alerts": [_serialize(a) for a in result]}

@router.delete("")
@handle_exceptions
async def delete_alert(request: DeleteAlertRequest, alerts=Depends(get_alert_repository)):
    """Xóa một cảnh báo khỏi mảng alerts của chuồng."""
    deleted = await asyncio.to_thread(
        alerts.delete_alert_by_id, request.branch, request.firestore_id, request.alert_id
    )
    return {"success": True, "deleted": _serialize(deleted)}

@router.get("/advice/{alert_type}")
async def get_advice(alert_type: str, message: str = Query("")):
    """Khuyến nghị xử lý theo loại cảnh báo."""
    return prescriptive_advice(alert_type, message).model_dump()
