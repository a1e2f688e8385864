import json

import pytest
import pytest_asyncio
import httpx
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.core.downstream import get_http_client
from app.core.oracle.executor import BatchExecutor

ORACLE_URL = "http://oracle.test"


class FakeOracle:
    """
    Stand-in for the Oracle execution API.

    Answers queued responses in order (200 "OK" once the queue is empty)
    and records every request it receives. Queued exceptions are raised,
    simulating transport failures.
    """

    def __init__(self):
        self.requests = []
        self.queued = []

    def queue(self, *items):
        self.queued.extend(items)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.queued.pop(0) if self.queued else httpx.Response(200, text="OK")
        if isinstance(item, Exception):
            raise item
        return item

    def sent_json(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture(scope="function")
def fake_oracle():
    return FakeOracle()


# Downstream client that never leaves the process
@pytest_asyncio.fixture(scope="function")
async def oracle_client(fake_oracle):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake_oracle.handler)
    ) as oracle:
        yield oracle


@pytest.fixture(scope="function")
def executor(oracle_client):
    return BatchExecutor(
        oracle_client,
        insert_url=f"{ORACLE_URL}/exec",
        procedure_url=f"{ORACLE_URL}/procedure",
        token="test-token",
    )


# Client
@pytest_asyncio.fixture(scope="function")
async def client(oracle_client):
    app.dependency_overrides[get_http_client] = lambda: oracle_client

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
