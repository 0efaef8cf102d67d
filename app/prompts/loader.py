"""
Prompt templates for the content generator.

All templates live in ``prompts.yaml`` next to this module and are rendered
with Jinja2 in strict mode, so a missing variable fails loudly instead of
leaking an empty string into a model prompt.

Usage:
    from app.prompts.loader import render_prompt

    rendered = render_prompt("prompt_breakdown_scenes", story_text="...")
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, StrictUndefined

_PROMPTS_PATH = Path(__file__).resolve().parent / "prompts.yaml"


@lru_cache(maxsize=1)
def _load_prompts() -> dict[str, Any]:
    with _PROMPTS_PATH.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("prompts.yaml must be a mapping at top level")
    for key, value in data.items():
        if isinstance(value, str):
            try:
                _jinja_env().parse(value)
            except Exception as e:
                raise ValueError(f"Invalid Jinja2 template in prompts.yaml:{key}: {e}") from e
    return data


@lru_cache(maxsize=1)
def _jinja_env() -> Environment:
    return Environment(
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def get_prompt(name: str) -> str:
    """Return the raw template for ``name``; raises KeyError if it is missing."""
    value = _load_prompts().get(name)
    if not isinstance(value, str):
        raise KeyError(f"Prompt '{name}' not found or not a string")
    return value


def list_prompts() -> list[str]:
    return list(_load_prompts().keys())


def render_prompt(name: str, **context: Any) -> str:
    """Render a template; ``system_prompt_json`` is injected when not supplied."""
    prompts = _load_prompts()
    if "system_prompt_json" not in context and "system_prompt_json" in prompts:
        context["system_prompt_json"] = prompts["system_prompt_json"]
    template = get_prompt(name)
    return _jinja_env().from_string(template).render(**context).strip()
