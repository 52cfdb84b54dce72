from fastapi import APIRouter, Query

from scriptbreaker.api.deps import EpisodeStoreDep
from scriptbreaker.api.v1.schemas import (
    EpisodeDetailRead,
    EpisodeRead,
    EpisodeStatusUpdate,
    PageRead,
)
from scriptbreaker.core.exceptions import EntityNotFoundError
from scriptbreaker.services import workflow
from scriptbreaker.services.hierarchy import Episode, find_episode


router = APIRouter(tags=["episodes"])


def _episode_or_404(store, episode_id: int) -> Episode:
    episode = find_episode(store.get_all_episodes(), episode_id)
    if episode is None:
        raise EntityNotFoundError("Episode", episode_id)
    return episode


def _episode_read(episode: Episode) -> EpisodeRead:
    return EpisodeRead(
        id=episode.id,
        title=episode.title,
        arc=episode.arc,
        status=episode.status,
        summary=episode.summary,
        page_count=episode.page_count,
        panel_count=len(episode.panels),
        completion_pct=workflow.completion_pct(episode),
    )


def _episode_detail(episode: Episode) -> EpisodeDetailRead:
    return EpisodeDetailRead(
        **_episode_read(episode).model_dump(),
        pages=[PageRead.model_validate(page) for page in episode.pages()],
    )


@router.get("/episodes", response_model=list[EpisodeRead])
def list_episodes(
    filter_name: str = Query(default=workflow.ALL_FILTER, alias="filter"),
    q: str = "",
    store=EpisodeStoreDep,
):
    episodes = workflow.filter_episodes(store.get_all_episodes(), filter_name)
    episodes = workflow.search_episodes(episodes, q)
    return [_episode_read(episode) for episode in episodes]


@router.get("/episodes/{episode_id}", response_model=EpisodeDetailRead)
def get_episode(episode_id: int, store=EpisodeStoreDep):
    return _episode_detail(_episode_or_404(store, episode_id))


@router.post("/episodes/{episode_id}/status", response_model=EpisodeRead)
def set_episode_status(episode_id: int, payload: EpisodeStatusUpdate, store=EpisodeStoreDep):
    episode = workflow.set_episode_status(store, episode_id, payload.status)
    return _episode_read(episode)
