from __future__ import annotations

import asyncio
import copy
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from core import db
from main import app

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeDatabase:
    """
    In-memory stand-in for the form tables.

    Only understands the statements the form repository issues. Timestamps
    advance one second per insert so ordering is deterministic. Advisory locks
    are real asyncio locks held until the transaction ends, and every query
    yields to the event loop like a network round-trip would.
    """

    def __init__(self) -> None:
        self.respondents: list[dict] = []
        self.submissions: list[dict] = []
        self.insights: list[dict] = []
        self.locks: list[str] = []
        self.transactions = 0
        self.fail_on_insights = False
        self.honor_locks = True
        self._tick = 0
        self._email_locks: dict[str, asyncio.Lock] = {}

    def now(self) -> datetime:
        self._tick += 1
        return _EPOCH + timedelta(seconds=self._tick)

    def email_lock(self, key: str) -> asyncio.Lock:
        return self._email_locks.setdefault(key, asyncio.Lock())

    def snapshot(self) -> tuple:
        return copy.deepcopy((self.respondents, self.submissions, self.insights))

    def restore(self, state: tuple) -> None:
        self.respondents, self.submissions, self.insights = state


class FakeConnection:
    def __init__(self, database: FakeDatabase) -> None:
        self.database = database
        self.held: list[asyncio.Lock] = []

    async def execute(self, sql: str, *args):
        if "pg_advisory_xact_lock" in sql:
            key = args[0].lower()
            self.database.locks.append(key)
            if self.database.honor_locks:
                lock = self.database.email_lock(key)
                await lock.acquire()
                self.held.append(lock)
            return "SELECT 1"
        raise AssertionError(f"unexpected statement: {sql}")

    async def fetchrow(self, sql: str, *args):
        await asyncio.sleep(0)
        d = self.database
        if "INSERT INTO respondents" in sql:
            name, email, company_name = args
            now = d.now()
            row = {
                "id": uuid4(),
                "name": name,
                "email": email,
                "company_name": company_name,
                "created_at": now,
                "updated_at": now,
            }
            d.respondents.append(row)
            return dict(row)

        if "FROM respondents" in sql:
            (email,) = args
            matches = [r for r in d.respondents if r["email"].lower() == email.lower()]
            matches.sort(key=lambda r: r["created_at"])
            return dict(matches[0]) if matches else None

        if "INSERT INTO form_submissions" in sql:
            respondent_id, form_type, responses, is_complete = args
            now = d.now()
            row = {
                "id": uuid4(),
                "respondent_id": respondent_id,
                "form_type": form_type,
                # jsonb comes back from asyncpg as text
                "responses": responses,
                "is_complete": is_complete,
                "submission_date": now,
                "updated_at": now,
            }
            d.submissions.append(row)
            return dict(row)

        raise AssertionError(f"unexpected query: {sql}")

    async def executemany(self, sql: str, records):
        d = self.database
        if "INSERT INTO financial_insights" not in sql:
            raise AssertionError(f"unexpected statement: {sql}")
        if d.fail_on_insights:
            raise RuntimeError("insert into financial_insights failed")
        for submission_id, respondent_id, title, content, category, priority, data in records:
            d.insights.append(
                {
                    "id": uuid4(),
                    "submission_id": submission_id,
                    "respondent_id": respondent_id,
                    "title": title,
                    "content": content,
                    "category": category,
                    "priority": priority,
                    "data": data,
                    "created_at": d.now(),
                }
            )


@pytest.fixture
def fake_db(monkeypatch) -> FakeDatabase:
    database = FakeDatabase()

    @asynccontextmanager
    async def fake_transaction():
        database.transactions += 1
        state = database.snapshot()
        conn = FakeConnection(database)
        try:
            yield conn
        except BaseException:
            database.restore(state)
            raise
        finally:
            # Transaction-scoped: released on commit or rollback.
            for lock in conn.held:
                lock.release()

    monkeypatch.setattr(db, "transaction", fake_transaction)
    return database


@pytest.fixture
def client() -> TestClient:
    # No `with` block: lifespan (and the real DB pool) never starts.
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()
