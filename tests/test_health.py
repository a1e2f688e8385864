import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/health", "/ping"])
async def test_health_check(client: AsyncClient, path):
    """Both health paths report OK and the available endpoints"""
    response = await client.get(path)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["server_info"]["version"] == "1.0.0"
    assert data["server_info"]["uptime"] >= 0
    assert any("/api/oracle/convert" in e for e in data["endpoints"])
