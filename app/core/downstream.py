from typing import Annotated

import httpx
from fastapi import Depends, Request

from app.core.config import settings
from app.core.oracle.executor import BatchExecutor


def create_http_client() -> httpx.AsyncClient:
    # Per-request timeout: a slow Oracle call ends up as a failed item
    return httpx.AsyncClient(timeout=settings.ORACLE_TIMEOUT_SECONDS)


# The shared client is opened and closed by the app lifespan
def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_executor(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> BatchExecutor:
    return BatchExecutor.from_settings(client, settings)
