from fastapi import APIRouter

from app.api.deps import RuntimeDep
from app.api.v1.schemas import AspectRatioOption, CataloguesRead, NoticeRead
from app.core import catalogues


router = APIRouter(tags=["studio"])


@router.get("/catalogues", response_model=CataloguesRead)
async def get_catalogues():
    return CataloguesRead(
        art_styles=catalogues.ART_STYLES,
        genres=catalogues.GENRES,
        writing_styles=catalogues.WRITING_STYLES,
        story_lengths=catalogues.STORY_LENGTHS,
        aspect_ratios=[AspectRatioOption(**option) for option in catalogues.ASPECT_RATIOS],
    )


@router.get("/notices", response_model=list[NoticeRead])
async def drain_notices(runtime=RuntimeDep):
    return [NoticeRead(level=n.level, message=n.message) for n in runtime.session.drain_notices()]
