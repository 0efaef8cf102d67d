from fastapi import APIRouter

from app.api.deps import RuntimeDep
from app.api.v1.schemas import LoginRequest, SessionRead


router = APIRouter(prefix="/auth", tags=["auth"])


def _session_read(runtime) -> SessionRead:
    session = runtime.session
    return SessionRead(user=session.user, step=session.step, current_project_id=session.current_project_id)


@router.post("/login", response_model=SessionRead)
async def login(payload: LoginRequest, runtime=RuntimeDep):
    if runtime.batch_running and payload.name.strip():
        runtime.batch.stop()
    runtime.session.login(payload.name, payload.email)
    return _session_read(runtime)


@router.post("/logout", response_model=SessionRead)
async def logout(runtime=RuntimeDep):
    if runtime.batch_running:
        runtime.batch.stop()
    runtime.session.logout()
    return _session_read(runtime)


@router.get("/session", response_model=SessionRead)
async def get_session(runtime=RuntimeDep):
    return _session_read(runtime)
