from fastapi import Depends, Request

from app.services.runtime import StudioRuntime


def studio_runtime(request: Request) -> StudioRuntime:
    return request.app.state.runtime


RuntimeDep = Depends(studio_runtime)
