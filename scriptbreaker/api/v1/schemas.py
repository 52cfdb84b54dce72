import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from scriptbreaker.services.hierarchy import EpisodeStatus, PanelStatus, PanelVisibility


class BreakdownCreate(BaseModel):
    # Empty text is valid: the pipeline degrades to placeholder scenes.
    text: str = Field(default="", max_length=200_000)
    episode_count: int | Literal["auto"] = Field(default="auto")

    @field_validator("episode_count")
    @classmethod
    def _positive_episode_count(cls, value: int | str) -> int | str:
        if isinstance(value, int) and value < 1:
            raise ValueError("episode_count must be 'auto' or a positive integer")
        return value


class BreakdownCommitRequest(BaseModel):
    target_episode: int | Literal["new"] = "new"


class MentionRead(BaseModel):
    name: str
    mention_count: int = Field(ge=0)
    tags: list[str]

    model_config = {"from_attributes": True}


class SceneRead(BaseModel):
    ordinal: int
    text: str
    tags: list[str]

    model_config = {"from_attributes": True}


class PanelDraftRead(BaseModel):
    name: str
    page_number: int
    panel_type: str
    framing: str
    description: str
    dialogue: str
    characters: list[str]
    scene: str
    props: list[str]

    model_config = {"from_attributes": True}


class PageDraftRead(BaseModel):
    page_number: int
    panels: list[PanelDraftRead]

    model_config = {"from_attributes": True}


class EpisodeDraftRead(BaseModel):
    title: str
    pages: list[PageDraftRead]

    model_config = {"from_attributes": True}


class BreakdownRead(BaseModel):
    episodes: list[EpisodeDraftRead]
    characters: list[MentionRead]
    locations: list[MentionRead]
    props: list[MentionRead]
    scenes: list[SceneRead]
    suggested_next_episode_id: int

    model_config = {"from_attributes": True}


class PendingBreakdownRead(BaseModel):
    breakdown_id: uuid.UUID
    created_at: datetime
    breakdown: BreakdownRead

    model_config = {"from_attributes": True}


class CommitResultRead(BaseModel):
    strategy: str
    selected_episode_id: int
    created_episode_ids: list[int]
    created_panel_ids: list[int]


class CommitRejectedRead(BaseModel):
    detail: str
    error: str
    request_id: str | None = None
    breakdown_id: uuid.UUID
    breakdown: BreakdownRead


class PanelRead(BaseModel):
    id: int
    name: str
    page_number: int
    panel_type: str
    framing: str
    description: str
    dialogue: str
    characters: list[str]
    scene: str
    props: list[str]
    status: PanelStatus
    visibility: PanelVisibility

    model_config = {"from_attributes": True}


class PageRead(BaseModel):
    page_number: int
    panels: list[PanelRead]

    model_config = {"from_attributes": True}


class EpisodeRead(BaseModel):
    id: int
    title: str
    arc: str
    status: EpisodeStatus
    summary: str
    page_count: int
    panel_count: int
    completion_pct: int


class EpisodeDetailRead(EpisodeRead):
    pages: list[PageRead]


class EpisodeStatusUpdate(BaseModel):
    status: EpisodeStatus


class PanelStatusUpdate(BaseModel):
    status: PanelStatus


class PanelVisibilityUpdate(BaseModel):
    visibility: PanelVisibility


class PanelListItem(PanelRead):
    episode_id: int
    episode_title: str


class PanelProgressRead(BaseModel):
    approved: int
    active: int
