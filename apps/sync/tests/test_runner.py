"""Runner lifecycle: worker tasks call the runners under a new loop each time."""

from __future__ import annotations

import asyncio

from sqlalchemy import event

from flight_finder_db.database import make_engine
from flight_finder_db.models import Base
from flight_finder_gds.config import AmadeusSettings
from flight_finder_sync import runner
from flight_finder_sync.config import SyncSettings


async def _create_schema(url: str) -> None:
    engine = make_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


def test_each_refresh_run_owns_and_disposes_its_engine(tmp_path, monkeypatch):
    url = f"sqlite+aiosqlite:///{tmp_path / 'prices.db'}"
    asyncio.run(_create_schema(url))

    created = []
    disposed = []

    def tracking_engine(database_url, **kwargs):
        engine = make_engine(database_url, **kwargs)
        created.append(engine)
        event.listen(
            engine.sync_engine, "engine_disposed", lambda _: disposed.append(engine)
        )
        return engine

    monkeypatch.setattr(runner, "make_engine", tracking_engine)
    settings = SyncSettings(_env_file=None, database_url=url, week_offsets="0")
    amadeus_settings = AmadeusSettings(
        _env_file=None, client_id="id", client_secret="secret"
    )

    results = [
        asyncio.run(
            runner.run_refresh(settings=settings, amadeus_settings=amadeus_settings)
        )
        for _ in range(2)
    ]

    assert [r.processed for r in results] == [0, 0]
    assert len(created) == 2
    assert created[0] is not created[1]
    assert disposed == created
