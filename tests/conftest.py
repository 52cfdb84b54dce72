import pytest
import httpx

from scriptbreaker.core import settings as settings_module
from scriptbreaker.db import models  # noqa: F401
from scriptbreaker.db.base import Base
from scriptbreaker.db.session import get_engine, init_engine
from scriptbreaker.main import app
from scriptbreaker.services import pending
from scriptbreaker.services.episode_store import InMemoryEpisodeStore, reset_episode_store
from scriptbreaker.services.hierarchy import Episode, Panel


@pytest.fixture()
def test_db(tmp_path, monkeypatch):
    db_path = tmp_path / "test.db"
    database_url = f"sqlite+pysqlite:///{db_path}"

    monkeypatch.setattr(settings_module.settings, "database_url", database_url)
    monkeypatch.setattr(settings_module.settings, "db_auto_create", True)
    monkeypatch.setattr(settings_module.settings, "episode_store_backend", "sql")

    init_engine(database_url)
    Base.metadata.create_all(bind=get_engine())
    reset_episode_store()
    pending.clear()

    yield database_url

    reset_episode_store()
    pending.clear()


@pytest.fixture()
async def client(test_db):
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


def _make_episode(episode_id: int, panel_ids: list[int], *, page_size: int = 2, **fields) -> Episode:
    panels = [
        Panel(
            id=panel_id,
            name=f"Panel {index + 1}",
            page_number=index // page_size + 1,
            panel_type="Action",
            description=f"Existing panel {panel_id}",
        )
        for index, panel_id in enumerate(panel_ids)
    ]
    fields.setdefault("title", f"Episode {episode_id}")
    episode = Episode(id=episode_id, panels=panels, **fields)
    episode.page_count = len(episode.distinct_page_numbers())
    return episode


@pytest.fixture()
def memory_store():
    return InMemoryEpisodeStore(
        [
            _make_episode(1, [1, 2, 3]),
            _make_episode(2, [4, 5]),
        ]
    )


@pytest.fixture()
def make_episode():
    return _make_episode
