"""
Routes API cho dashboard: số đo mới nhất, lựa chọn chuồng và tổng quan chi nhánh.
"""
import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pems.infrastructure.dependencies import (
    get_dashboard_poller,
    get_dashboard_service,
    handle_exceptions
)

logger = logging.getLogger(__name__)

router = APIRouter()

class SelectionRequest(BaseModel):
    branch: str
    firestore_id: str

@router.post("/select")
@handle_exceptions
async def select_channel(request: SelectionRequest, poller=Depends(get_dashboard_poller)):
    """Chọn chuồng hiển thị trên dashboard và làm mới ngay."""
    snapshot = await poller.select(request.branch, request.firestore_id)
    return {
        "generation": poller.state.generation,
        "snapshot": snapshot.model_dump(mode="json") if snapshot else None
    }

@router.get("/snapshot")
@handle_exceptions
async def get_snapshot(poller=Depends(get_dashboard_poller)):
    """Dữ liệu hiện tại của chuồng đang chọn (được làm mới định kỳ)."""
    selection = poller.state.selection
    snapshot = poller.state.snapshot
    return {
        "selection": None if selection is None else {
            "branch": selection.branch,
            "firestore_id": selection.firestore_id,
            "generation": selection.generation
        },
        "snapshot": snapshot.model_dump(mode="json") if snapshot else None
    }

@router.get("/{branch}/health")
@handle_exceptions
async def get_health_overview(branch: str, dashboard=Depends(get_dashboard_service)):
    """Bảng tổng quan sức khỏe của tất cả chuồng trong chi nhánh."""
    overview = await dashboard.health_overview(branch)
    return overview.model_dump(mode="json")

@router.get("/{branch}/{firestore_id}/latest")
@handle_exceptions
async def get_latest(branch: str, firestore_id: str, dashboard=Depends(get_dashboard_service)):
    """Số đo mới nhất và trạng thái theo ngưỡng của một chuồng."""
    channel = await dashboard.get_channel(branch, firestore_id)
    result = await dashboard.latest(channel)
    if "latest" in result:
        result["latest"] = result["latest"].model_dump(mode="json")
    return result
