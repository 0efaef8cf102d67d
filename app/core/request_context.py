import contextvars
from contextlib import contextmanager

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
project_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("project_id", default=None)
scene_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("scene_id", default=None)


def set_request_id(request_id: str) -> contextvars.Token:
    """Store the current request ID in a context variable."""
    return request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    """Reset the request ID context variable to a previous state."""
    request_id_var.reset(token)


def get_request_id() -> str | None:
    """Retrieve the current request ID from the context."""
    return request_id_var.get()


def get_project_id() -> str | None:
    return project_id_var.get()


def get_scene_id() -> str | None:
    return scene_id_var.get()


@contextmanager
def log_context(project_id: str | None = None, scene_id: str | None = None):
    """Temporarily scope project/scene ids for structured logs."""
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token]] = []
    if project_id is not None:
        tokens.append((project_id_var, project_id_var.set(str(project_id))))
    if scene_id is not None:
        tokens.append((scene_id_var, scene_id_var.set(str(scene_id))))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
