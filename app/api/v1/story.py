from fastapi import APIRouter

from app.api.deps import RuntimeDep
from app.api.v1.projects import workspace_read
from app.api.v1.schemas import IdeaRequest, StoryDraftRead, WorkspaceRead
from app.services import story_workflow


router = APIRouter(prefix="/story", tags=["story"])


@router.post("/idea", response_model=StoryDraftRead)
async def generate_idea(payload: IdeaRequest, runtime=RuntimeDep):
    runtime.session.require_project()
    draft = await story_workflow.generate_story_from_idea(
        runtime.session, runtime.require_generator(), payload.idea
    )
    return StoryDraftRead(title=draft.title, story=draft.story)


@router.post("/analyze", response_model=WorkspaceRead)
async def analyze(runtime=RuntimeDep):
    runtime.session.require_project()
    await story_workflow.analyze_story(runtime.session, runtime.require_generator())
    return workspace_read(runtime)
