import pytest
from jinja2.exceptions import UndefinedError

from app.prompts import loader


def test_list_prompts_contains_generator_templates():
    names = set(loader.list_prompts())
    assert {
        "prompt_expand_idea",
        "prompt_extract_characters",
        "prompt_breakdown_scenes",
        "prompt_character_sheet",
        "prompt_scene_image",
    } <= names


def test_render_prompt_includes_shared_json_instruction():
    rendered = loader.render_prompt("prompt_breakdown_scenes", story_text="A brief story")
    assert "A brief story" in rendered
    assert "Respond with JSON only" in rendered


def test_render_prompt_is_strict_about_missing_variables():
    with pytest.raises(UndefinedError):
        loader.render_prompt("prompt_expand_idea", idea="x")


def test_scene_prompt_without_characters_skips_consistency_block():
    rendered = loader.render_prompt("prompt_scene_image", style="Ghibli", scene_text="Rain.", characters=[])
    assert "Keep these characters" not in rendered
    assert "Rain." in rendered


def test_unknown_prompt_raises_key_error():
    with pytest.raises(KeyError):
        loader.get_prompt("prompt_does_not_exist")


def test_invalid_template_raises_and_is_not_silently_ignored(tmp_path, monkeypatch):
    bad_file = tmp_path / "prompts.yaml"
    bad_file.write_text("bad_prompt: '{% if foo %} missing endif'\n", encoding="utf-8")
    monkeypatch.setattr(loader, "_PROMPTS_PATH", bad_file)

    loader._load_prompts.cache_clear()
    try:
        with pytest.raises(ValueError):
            loader._load_prompts()
    finally:
        loader._load_prompts.cache_clear()
