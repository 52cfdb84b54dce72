from fastapi import APIRouter

from scriptbreaker.api.deps import EpisodeStoreDep
from scriptbreaker.api.v1.schemas import (
    PanelListItem,
    PanelProgressRead,
    PanelRead,
    PanelStatusUpdate,
    PanelVisibilityUpdate,
)
from scriptbreaker.services import workflow


router = APIRouter(tags=["panels"])


@router.get("/panels", response_model=list[PanelListItem])
def list_panels(
    episode_id: int | None = None,
    status: str = workflow.ALL_FILTER,
    visibility: str = workflow.ACTIVE_FILTER,
    q: str = "",
    store=EpisodeStoreDep,
):
    matches = workflow.filter_panels(
        store.get_all_episodes(),
        episode_id=episode_id,
        status=status,
        visibility=visibility,
        query=q,
    )
    return [
        PanelListItem(
            **PanelRead.model_validate(panel).model_dump(),
            episode_id=episode.id,
            episode_title=episode.title,
        )
        for episode, panel in matches
    ]


@router.get("/panels/progress", response_model=PanelProgressRead)
def get_panel_progress(store=EpisodeStoreDep):
    approved, active = workflow.panel_progress(store.get_all_episodes())
    return PanelProgressRead(approved=approved, active=active)


@router.post("/panels/{panel_id}/status", response_model=PanelRead)
def set_panel_status(panel_id: int, payload: PanelStatusUpdate, store=EpisodeStoreDep):
    return workflow.set_panel_status(store, panel_id, payload.status)


@router.post("/panels/{panel_id}/approve", response_model=PanelRead)
def approve_panel(panel_id: int, store=EpisodeStoreDep):
    return workflow.approve_panel(store, panel_id)


@router.post("/panels/{panel_id}/redo", response_model=PanelRead)
def redo_panel(panel_id: int, store=EpisodeStoreDep):
    return workflow.request_redo(store, panel_id)


@router.post("/panels/{panel_id}/regenerate", response_model=PanelRead)
def regenerate_panel(panel_id: int, store=EpisodeStoreDep):
    return workflow.regenerate_panel(store, panel_id)


@router.post("/panels/{panel_id}/visibility", response_model=PanelRead)
def set_panel_visibility(panel_id: int, payload: PanelVisibilityUpdate, store=EpisodeStoreDep):
    return workflow.set_panel_visibility(store, panel_id, payload.visibility)


@router.post("/panels/{panel_id}/toggle-visibility", response_model=PanelRead)
def toggle_panel_visibility(panel_id: int, store=EpisodeStoreDep):
    return workflow.toggle_panel_visibility(store, panel_id)


@router.post("/panels/{panel_id}/trash", response_model=PanelRead)
def trash_panel(panel_id: int, store=EpisodeStoreDep):
    return workflow.trash_panel(store, panel_id)
