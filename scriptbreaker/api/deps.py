from fastapi import Depends

from scriptbreaker.services.episode_store import EpisodeStore, get_episode_store


def episode_store() -> EpisodeStore:
    return get_episode_store()


EpisodeStoreDep = Depends(episode_store)
