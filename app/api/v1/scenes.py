from fastapi import APIRouter

from app.api.deps import RuntimeDep
from app.api.v1.schemas import GenerationResult, SceneUpdate
from app.core.entities import Scene
from app.core.exceptions import InputValidationError
from app.services import image_generation


router = APIRouter(prefix="/scenes", tags=["scenes"])


@router.post("", response_model=Scene, status_code=201)
async def add_scene(runtime=RuntimeDep):
    runtime.session.require_project()
    return runtime.session.add_scene()


@router.patch("/{scene_id}", response_model=Scene)
async def update_scene(scene_id: str, payload: SceneUpdate, runtime=RuntimeDep):
    scene = runtime.session.update_scene_text(scene_id, payload.text)
    # Text edits are committed as a whole, so they are saved right away.
    runtime.session.persist_current_project()
    return scene


@router.post("/{scene_id}/generate-image", response_model=GenerationResult)
async def generate_scene_image(scene_id: str, runtime=RuntimeDep):
    runtime.session.get_scene(scene_id)
    if runtime.batch_running:
        raise InputValidationError("a batch run is in progress", detail="batch generation is running")
    ok = await image_generation.generate_scene_image(runtime.session, runtime.require_generator(), scene_id)
    return GenerationResult(ok=ok, notices=[n.message for n in runtime.session.drain_notices()])
