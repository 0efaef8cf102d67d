import json

import pytest

from app.core.entities import Project, User
from app.core.exceptions import EntityNotFoundError
from app.services.local_store import LocalStore, SqlDocumentBackend, StoreKeys


def _user(**overrides) -> User:
    data = {"id": "u1", "name": "Layla", "email": "layla@example.com"}
    data.update(overrides)
    return User(**data)


class TestSession:
    def test_missing_session_is_none(self, store):
        assert store.load_session() is None

    def test_save_then_load(self, store):
        store.save_session(_user())
        assert store.load_session() == _user()

    def test_clear_removes_session(self, store):
        store.save_session(_user())
        store.clear_session()
        assert store.load_session() is None

    def test_clear_without_session_is_harmless(self, store):
        store.clear_session()
        assert store.load_session() is None

    def test_malformed_json_is_treated_as_absent(self, store):
        store.backend.write(store.keys.session, "{not json")
        assert store.load_session() is None

    def test_wrong_shape_is_treated_as_absent(self, store):
        store.backend.write(store.keys.session, json.dumps({"nickname": "x"}))
        assert store.load_session() is None


class TestCollections:
    def test_empty_when_absent(self, store):
        assert store.load_user_directory() == []
        assert store.load_projects() == []

    def test_corrupt_collections_are_empty(self, store):
        store.backend.write(store.keys.users, "[{")
        store.backend.write(store.keys.projects, json.dumps({"not": "a list"}))
        assert store.load_user_directory() == []
        assert store.load_projects() == []

    def test_save_is_full_overwrite(self, store):
        store.save_user_directory([_user(id="a"), _user(id="b")])
        store.save_user_directory([_user(id="c")])
        assert [u.id for u in store.load_user_directory()] == ["c"]

    def test_projects_keep_camel_case_layout(self, store):
        project = Project(user_id="u1", title="t")
        store.save_projects([project])
        raw = json.loads(store.backend.read(store.keys.projects))
        assert raw[0]["userId"] == "u1"
        assert "storyTextRaw" in raw[0]["config"]
        assert "updatedAt" in raw[0]

    def test_saving_twice_is_idempotent(self, store):
        projects = [Project(user_id="u1", title="a"), Project(user_id="u2", title="b")]
        store.save_projects(projects)
        first = store.backend.read(store.keys.projects)
        store.save_projects(projects)
        assert store.backend.read(store.keys.projects) == first

    def test_invalid_record_is_skipped_and_the_rest_kept(self, store):
        keep = Project(user_id="u1", title="keep me")
        store.backend.write(store.keys.projects, json.dumps([keep.to_document(), {"id": "broken"}]))

        assert [p.title for p in store.load_projects()] == ["keep me"]

    def test_invalid_user_record_does_not_hide_directory(self, store):
        store.backend.write(store.keys.users, json.dumps([{"nickname": "x"}, _user().to_document()]))
        assert store.load_user_directory() == [_user()]


class TestUpdateProject:
    def test_replaces_only_the_matching_project(self, store):
        a = Project(user_id="u1", title="a")
        b = Project(user_id="u1", title="b")
        store.save_projects([a, b])

        store.update_project(b.id, lambda p: p.model_copy(update={"title": "renamed"}))

        titles = [p.title for p in store.load_projects()]
        assert titles == ["a", "renamed"]

    def test_unknown_project_raises(self, store):
        store.save_projects([Project(user_id="u1", title="a")])
        with pytest.raises(EntityNotFoundError):
            store.update_project("missing", lambda p: p)


def test_custom_keys_are_independent():
    backend = SqlDocumentBackend()
    first = LocalStore(backend)
    second = LocalStore(backend, StoreKeys(session="other_user", users="other_users", projects="other_projects"))

    first.save_session(_user())
    assert second.load_session() is None
