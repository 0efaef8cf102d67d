from fastapi import APIRouter, Query, Response

from app.api.deps import RuntimeDep
from app.api.v1.schemas import (
    AnimationPromptRead,
    ConfigUpdate,
    GalleryItemRead,
    ProjectCreate,
    WorkspaceRead,
)
from app.core.entities import AppStep, Project
from app.services.runtime import StudioRuntime


router = APIRouter(prefix="/projects", tags=["projects"])


def workspace_read(runtime: StudioRuntime) -> WorkspaceRead:
    session = runtime.session
    return WorkspaceRead(
        project_id=session.current_project_id,
        step=session.step,
        config=session.config,
        characters=session.characters,
        scenes=session.scenes,
        batch_running=runtime.batch_running,
    )


@router.post("", response_model=Project, status_code=201)
async def create_project(payload: ProjectCreate, runtime=RuntimeDep):
    return runtime.session.create_project(manual=payload.manual)


@router.get("", response_model=list[GalleryItemRead])
async def list_projects(runtime=RuntimeDep):
    runtime.session.step = AppStep.GALLERY
    return [GalleryItemRead.from_project(p) for p in runtime.session.gallery()]


@router.get("/current", response_model=WorkspaceRead)
async def get_current_project(runtime=RuntimeDep):
    runtime.session.require_project()
    return workspace_read(runtime)


@router.post("/current/save", response_model=Project)
async def save_current_project(runtime=RuntimeDep):
    runtime.session.require_user()
    runtime.session.require_project()
    return runtime.session.persist_current_project()


@router.patch("/current/config", response_model=WorkspaceRead)
async def update_current_config(payload: ConfigUpdate, runtime=RuntimeDep):
    runtime.session.require_project()
    runtime.session.update_config(**payload.model_dump(exclude_none=True))
    runtime.session.schedule_persist()
    return workspace_read(runtime)


@router.get("/current/animation-prompts", response_model=list[AnimationPromptRead])
async def list_animation_prompts(runtime=RuntimeDep):
    runtime.session.require_project()
    return [
        AnimationPromptRead(scene_id=s.id, index=i + 1, image_url=s.image_url, image_prompt=s.image_prompt)
        for i, s in enumerate(runtime.session.scenes)
        if s.image_url
    ]


@router.post("/{project_id}/open", response_model=WorkspaceRead)
async def open_project(project_id: str, runtime=RuntimeDep):
    runtime.session.require_user()
    if runtime.batch_running:
        runtime.batch.stop()
    runtime.session.load_project(project_id)
    return workspace_read(runtime)


@router.delete("/{project_id}", status_code=204)
async def delete_project(project_id: str, confirm: bool = Query(default=False), runtime=RuntimeDep):
    runtime.session.require_user()
    if confirm and runtime.batch_running and project_id == runtime.session.current_project_id:
        runtime.batch.stop()
    if not runtime.session.delete_project(project_id, confirmed=confirm):
        return Response(status_code=409, content="deletion requires confirm=true")
    return Response(status_code=204)
