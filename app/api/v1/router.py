from fastapi import APIRouter

from app.api.v1 import auth, batch, characters, projects, scenes, story, studio


api_router = APIRouter(prefix="/v1")

api_router.include_router(auth.router)
api_router.include_router(studio.router)
api_router.include_router(projects.router)
api_router.include_router(story.router)
api_router.include_router(characters.router)
api_router.include_router(scenes.router)
api_router.include_router(batch.router)
