import asyncio

import httpx
import pytest

from app.core import settings as settings_module
from app.core.entities import Character, Scene, StoryDraft
from app.core.exceptions import GenerationError
from app.db.session import create_tables, init_engine
from app.main import app
from app.services.local_store import LocalStore, SqlDocumentBackend
from app.services.studio import StudioSession


class FakeContentGenerator:
    """Scripted stand-in for the Gemini-backed generator."""

    def __init__(self):
        self.image_calls: list[tuple[str, str, bool]] = []
        self.fail_markers: set[str] = set()
        self.fail_images = False
        self.before_image = None
        self.draft = StoryDraft(title="فجر البطل", story="A hero rises at dawn.")
        self.characters = [Character(name="الفارس", description="فارس شجاع", visual_prompt="knight in silver armor")]
        self.scenes = [Scene(text="Dawn breaks over the hills."), Scene(text="The hero rises.")]
        self.fail_analysis = False

    async def generate_image(self, prompt, aspect_ratio, is_character_sheet=False):
        self.image_calls.append((prompt, aspect_ratio, is_character_sheet))
        if self.before_image is not None:
            await self.before_image(len(self.image_calls))
        else:
            await asyncio.sleep(0)
        if self.fail_images or any(marker in prompt for marker in self.fail_markers):
            raise GenerationError("image rejected")
        return f"/media/fake-{len(self.image_calls)}.png"

    async def expand_idea_to_story(self, idea, genre, style, length_hint):
        await asyncio.sleep(0)
        return self.draft

    async def analyze_story_and_extract_characters(self, story_text, style):
        await asyncio.sleep(0)
        if self.fail_analysis:
            raise GenerationError("analysis rejected")
        return [c.model_copy() for c in self.characters]

    async def breakdown_story_into_scenes(self, story_text):
        await asyncio.sleep(0)
        return [s.model_copy() for s in self.scenes]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _use_test_db(tmp_path, monkeypatch):
    db_path = tmp_path / "test.db"
    database_url = f"sqlite+pysqlite:///{db_path}"

    monkeypatch.setattr(settings_module.settings, "database_url", database_url)
    monkeypatch.setattr(settings_module.settings, "db_auto_create", True)
    monkeypatch.setattr(settings_module.settings, "media_root", str(tmp_path / "media"))
    monkeypatch.setattr(settings_module.settings, "gemini_api_key", None)
    monkeypatch.setattr(settings_module.settings, "google_cloud_project", None)

    init_engine(database_url)
    create_tables()

    yield


@pytest.fixture()
def store():
    return LocalStore(SqlDocumentBackend())


@pytest.fixture()
def generator():
    return FakeContentGenerator()


@pytest.fixture()
def studio(store):
    """A signed-in session with one freshly created project open."""
    session = StudioSession(store)
    session.login("Layla", "layla@example.com")
    session.create_project(manual=True)
    return session


@pytest.fixture()
async def client(generator):
    async with app.router.lifespan_context(app):
        app.state.runtime.generator = generator
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
