"""
Routes API cho danh sách chuồng (channel).
"""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from pems.infrastructure.dependencies import get_channel_repository, handle_exceptions

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("")
@handle_exceptions
async def list_channels(
    branch: Optional[str] = Query(None, description="Chỉ lấy chuồng của chi nhánh này"),
    channels=Depends(get_channel_repository)
):
    """Lấy danh sách chuồng, không kèm read API key."""
    result = await asyncio.to_thread(channels.list_channels, branch)
    return {
        "count": len(result),
        "channels": [c.model_dump(exclude={"read_api_key"}) for c in result]
    }
