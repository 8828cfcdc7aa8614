"""Tests for the health endpoint."""
from httpx import AsyncClient


async def test_health_check(anonymous_client: AsyncClient) -> None:
    """Health needs no authentication and reports the database."""
    response = await anonymous_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "healthy"}
    assert response.headers["x-content-type-options"] == "nosniff"
