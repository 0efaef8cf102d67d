from fastapi import APIRouter

from app.api.deps import RuntimeDep
from app.api.v1.schemas import BatchStatusRead


router = APIRouter(prefix="/batch", tags=["batch"])


@router.get("", response_model=BatchStatusRead)
async def get_batch_status(runtime=RuntimeDep):
    return BatchStatusRead(running=runtime.batch_running)


@router.post("/toggle", response_model=BatchStatusRead, status_code=202)
async def toggle_batch(runtime=RuntimeDep):
    runtime.session.require_project()
    return BatchStatusRead(running=runtime.batch.toggle())
