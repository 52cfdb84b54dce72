from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class GazetteerEntry(BaseModel):
    name: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)


class GazetteerV1(BaseModel):
    version: str
    characters: list[GazetteerEntry]
    locations: list[GazetteerEntry] = Field(default_factory=list)
    props: list[GazetteerEntry] = Field(default_factory=list)
    fallback_character: GazetteerEntry


class PanelTypeItem(BaseModel):
    id: str = Field(min_length=1)
    framing: str = Field(min_length=1)


class SceneTagRules(BaseModel):
    first: list[str]
    middle: list[str]
    last: list[str]


class BreakdownRulesV1(BaseModel):
    version: str
    min_fragment_length: int = Field(ge=0)
    min_scenes: int = Field(ge=1)
    max_scenes: int = Field(ge=1)
    placeholder_scene_template: str = Field(min_length=1)
    scene_tags: SceneTagRules
    scenes_per_episode: int = Field(ge=1)
    panels_per_page: int = Field(ge=1)
    panel_types: list[PanelTypeItem] = Field(min_length=1)
    opening_dialogue: str
    closing_dialogue: str
    unknown_location: str = Field(min_length=1)
    title_headline_words: int = Field(default=5, ge=1)
    created_episode_arc: str = Field(min_length=1)
    summary_max_chars: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_scene_bounds(self) -> "BreakdownRulesV1":
        if self.min_scenes > self.max_scenes:
            raise ValueError("min_scenes must not exceed max_scenes")
        return self


def clear_config_cache():
    """Clear all cached config data. Call this to force config reload."""
    load_gazetteer_v1.cache_clear()
    load_breakdown_rules_v1.cache_clear()


# ============================================================================
# Config Loaders
# ============================================================================

_CONFIG_DIR = Path(__file__).parent


@lru_cache(maxsize=1)
def load_gazetteer_v1() -> GazetteerV1:
    """Load the entity gazetteer (characters, locations, props)."""
    path = _CONFIG_DIR / "gazetteer_v1.json"
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return GazetteerV1.model_validate(data)


@lru_cache(maxsize=1)
def load_breakdown_rules_v1() -> BreakdownRulesV1:
    """Load segmentation and composition rules."""
    path = _CONFIG_DIR / "breakdown_rules_v1.json"
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return BreakdownRulesV1.model_validate(data)
