"""
Routes API quản lý worker.
"""
import asyncio
import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pems.infrastructure.dependencies import get_worker_repository, handle_exceptions

logger = logging.getLogger(__name__)

router = APIRouter()

class WorkerRequest(BaseModel):
    name: str
    phone_number: str
    branch: str

@router.get("")
@handle_exceptions
async def list_workers(workers=Depends(get_worker_repository)):
    result = await asyncio.to_thread(workers.list_workers)
    return {"count": len(result), "workers": result}

@router.post("")
@handle_exceptions
async def create_worker(request: WorkerRequest, workers=Depends(get_worker_repository)):
    return await asyncio.to_thread(
        workers.create_worker, request.name, request.phone_number, request.branch
    )

@router.put("/{phone_number}")
@handle_exceptions
async def update_worker(phone_number: str, request: WorkerRequest,
                        workers=Depends(get_worker_repository)):
    return await asyncio.to_thread(
        workers.update_worker, phone_number, request.name, request.phone_number, request.branch
    )

@router.delete("/{phone_number}")
@handle_exceptions
async def delete_worker(phone_number: str, workers=Depends(get_worker_repository)):
    await asyncio.to_thread(workers.delete_worker, phone_number)
    return {"success": True}
