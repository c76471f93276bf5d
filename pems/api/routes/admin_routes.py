"""
Routes API cho danh sách admin.
"""
import asyncio
import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pems.infrastructure.dependencies import get_admin_repository, handle_exceptions

logger = logging.getLogger(__name__)

router = APIRouter()

class AdminRequest(BaseModel):
    email: str

@router.get("")
@handle_exceptions
async def list_admins(admins=Depends(get_admin_repository)):
    result = await asyncio.to_thread(admins.list_admins)
    return {"count": len(result), "admins": result}

@router.post("")
@handle_exceptions
async def add_admin(request: AdminRequest, admins=Depends(get_admin_repository)):
    return await asyncio.to_thread(admins.add_admin, request.email)

@router.delete("/{email}")
@handle_exceptions
async def remove_admin(email: str, admins=Depends(get_admin_repository)):
    await asyncio.to_thread(admins.remove_admin, email)
    return {"success": True}
