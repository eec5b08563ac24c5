"""Fixtures compartidos: base SQLite temporal con los tickets de demostración"""
import os

# Antes de importar shared.core.config
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["VERIFY_RATE_LIMIT"] = "1000/minute"
os.environ["DATABASE_AUTO_CREATE"] = "false"
os.environ["APP_ENV"] = "test"

import httpx
import pytest_asyncio

from shared.database import connection
from scripts.seed_tickets import seed_tickets


@pytest_asyncio.fixture
async def database(tmp_path):
    await connection.init_db(f"sqlite+aiosqlite:///{tmp_path / 'tickets.db'}")
    await connection.create_tables()
    async with connection.async_session_maker() as session:
        await seed_tickets(session)
    yield connection.async_session_maker
    await connection.close_db()


@pytest_asyncio.fixture
async def db_session(database):
    async with database() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(database):
    from main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
