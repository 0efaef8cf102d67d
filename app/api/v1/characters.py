import asyncio

from fastapi import APIRouter, File, UploadFile

from app.api.deps import RuntimeDep
from app.api.v1.schemas import GenerationResult
from app.core.entities import Character
from app.core.exceptions import InputValidationError
from app.services import image_generation
from app.services.storage import sniff_image_mime


router = APIRouter(prefix="/characters", tags=["characters"])


@router.post("", response_model=Character, status_code=201)
async def add_character(runtime=RuntimeDep):
    runtime.session.require_project()
    return runtime.session.add_character()


@router.post("/{character_id}/regenerate", response_model=GenerationResult)
async def regenerate_character(character_id: str, runtime=RuntimeDep):
    runtime.session.get_character(character_id)
    ok = await image_generation.regenerate_character(runtime.session, runtime.require_generator(), character_id)
    return GenerationResult(ok=ok, notices=[n.message for n in runtime.session.drain_notices()])


@router.post("/{character_id}/avatar", response_model=Character)
async def upload_avatar(character_id: str, file: UploadFile = File(...), runtime=RuntimeDep):
    runtime.session.get_character(character_id)
    image_bytes = await file.read()
    try:
        mime_type = sniff_image_mime(image_bytes)
    except ValueError as exc:
        raise InputValidationError(str(exc)) from exc
    url = await asyncio.to_thread(runtime.media_store.save_image_bytes, image_bytes, mime_type)
    return runtime.session.set_character_avatar(character_id, url)
