import asyncio
import json
import logging
import time

import httpx
import pytest

from app.core.oracle.executor import BatchExecutor, DownstreamUnavailable


@pytest.mark.asyncio
async def test_execute_empty_batch(executor, fake_oracle):
    """Nothing to send -> empty summary, no downstream calls"""
    summary = await executor.execute([])

    assert summary.model_dump() == {"total": 0, "successful": 0, "failed": 0, "details": []}
    assert fake_oracle.requests == []


@pytest.mark.asyncio
async def test_execute_sends_query_payload_with_bearer(executor, fake_oracle):
    await executor.execute(["INSERT INTO GANANCIAS.t (a) VALUES (1)"])

    request = fake_oracle.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://oracle.test/exec"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert fake_oracle.sent_json() == [{"query": "INSERT INTO GANANCIAS.t (a) VALUES (1)"}]


@pytest.mark.asyncio
async def test_transport_failure_does_not_abort_batch(executor, fake_oracle):
    fake_oracle.queue(
        httpx.Response(200, text='{"rows": 1}'),
        httpx.ConnectError("Connection refused"),
    )

    summary = await executor.execute(["s1", "s2"])

    assert (summary.total, summary.successful, summary.failed) == (2, 1, 1)
    assert summary.details[0].model_dump() == {"insert": "s1", "status": 200, "result": '{"rows": 1}'}
    assert summary.details[1].model_dump() == {"insert": "s2", "status": 500, "result": "Connection refused"}


@pytest.mark.asyncio
async def test_downstream_error_status_is_captured(executor, fake_oracle):
    """4xx/5xx answers are data, not transport failures"""
    fake_oracle.queue(
        httpx.Response(400, text="ORA-00942: table or view does not exist"),
        httpx.Response(201, text="created"),
        httpx.Response(503, text="busy"),
        httpx.Response(299, text="edge"),
        httpx.Response(300, text="redirect"),
    )

    summary = await executor.execute(["a", "b", "c", "d", "e"])

    assert [d.status for d in summary.details] == [400, 201, 503, 299, 300]
    assert summary.details[0].result == "ORA-00942: table or view does not exist"
    assert (summary.total, summary.successful, summary.failed) == (5, 2, 3)
    assert summary.total == summary.successful + summary.failed == len(summary.details)


@pytest.mark.asyncio
async def test_timeout_becomes_failed_item(executor, fake_oracle):
    fake_oracle.queue(httpx.ReadTimeout(""))

    summary = await executor.execute(["slow"])

    assert summary.details[0].status == 500
    assert summary.details[0].result == "ReadTimeout"
    assert summary.failed == 1


@pytest.mark.asyncio
async def test_statements_are_sent_sequentially():
    """Statement 2 only starts after statement 1 has answered"""
    events = []

    async def slow_oracle(request: httpx.Request) -> httpx.Response:
        query = json.loads(request.content)["query"]
        events.append(("start", query, time.monotonic()))
        await asyncio.sleep(0.02)
        events.append(("end", query, time.monotonic()))
        if query == "s2":
            raise httpx.ConnectError("boom")
        return httpx.Response(200, text="OK")

    async with httpx.AsyncClient(transport=httpx.MockTransport(slow_oracle)) as oracle:
        executor = BatchExecutor(oracle, "http://oracle.test/exec", "http://oracle.test/procedure", "t")
        summary = await executor.execute(["s1", "s2", "s3"])

    assert [(kind, query) for kind, query, _ in events] == [
        ("start", "s1"), ("end", "s1"),
        ("start", "s2"), ("end", "s2"),
        ("start", "s3"), ("end", "s3"),
    ]
    stamps = [stamp for _, _, stamp in events]
    assert stamps == sorted(stamps)
    assert [d.insert for d in summary.details] == ["s1", "s2", "s3"]
    assert [d.status for d in summary.details] == [200, 500, 200]


@pytest.mark.asyncio
async def test_executor_logs_to_injected_logger(oracle_client, caplog):
    sink = logging.getLogger("tests.executor.sink")
    executor = BatchExecutor(oracle_client, "http://oracle.test/exec", "http://oracle.test/procedure", "t", log=sink)

    with caplog.at_level(logging.INFO, logger="tests.executor.sink"):
        await executor.execute(["INSERT INTO GANANCIAS.t (a) VALUES (1)"])

    messages = [r.getMessage() for r in caplog.records if r.name == "tests.executor.sink"]
    assert any(m.startswith("SQL 1/1: INSERT INTO GANANCIAS.t") for m in messages)
    assert any("1 exitosos, 0 fallidos" in m for m in messages)


@pytest.mark.asyncio
async def test_forward_procedure_passes_body_through(executor, fake_oracle):
    body = b'{"name": "PKG.PROC", "isFunction": false}'
    fake_oracle.queue(httpx.Response(200, text='{"out": 7}'))

    result = await executor.forward_procedure(body, procedure="PKG.PROC")

    request = fake_oracle.requests[0]
    assert str(request.url) == "http://oracle.test/procedure"
    assert request.content == body
    assert request.headers["Authorization"] == "Bearer test-token"
    assert (result.procedure, result.status, result.result) == ("PKG.PROC", 200, '{"out": 7}')
    assert result.executionTime is not None
    assert result.content == b'{"out": 7}'


@pytest.mark.asyncio
async def test_forward_procedure_keeps_error_status(executor, fake_oracle):
    fake_oracle.queue(httpx.Response(500, text="ORA-06550"))

    result = await executor.forward_procedure(b"{}")

    assert (result.status, result.result) == (500, "ORA-06550")


@pytest.mark.asyncio
async def test_forward_procedure_transport_failure(executor, fake_oracle):
    fake_oracle.queue(httpx.ConnectError("Connection refused"))

    with pytest.raises(DownstreamUnavailable, match="Connection refused"):
        await executor.forward_procedure(b"{}")
