import asyncio

import pytest

from slidegen import database


class TimingOutSession:
    def add(self, row):
        self.row = row

    async def commit(self):
        raise asyncio.TimeoutError()

    async def execute(self, statement):
        raise asyncio.TimeoutError()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def unreachable_database(monkeypatch):
    async def init_db():
        return True

    monkeypatch.setattr(database, "init_db", init_db)
    monkeypatch.setattr(database, "get_session_maker", lambda: TimingOutSession)


@pytest.mark.asyncio
async def test_record_swallows_connect_timeouts(unreachable_database):
    recorded = await database.record_generated_image(filename="a.png", url="/images/a.png", source="batch")
    assert recorded is False


@pytest.mark.asyncio
async def test_list_returns_empty_on_connect_timeouts(unreachable_database):
    assert await database.list_generated_images() == []


@pytest.mark.asyncio
async def test_helpers_are_noops_without_database_url(monkeypatch):
    monkeypatch.setattr(database, "get_engine", lambda: None)
    monkeypatch.setattr(database, "_initialized", False)
    assert await database.init_db() is False
    assert await database.record_generated_image(filename="a.png", url="/images/a.png", source="generate") is False
