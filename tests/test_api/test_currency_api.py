"""Tests for the currency endpoints."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_rates(client: AsyncClient):
    response = await client.get("/api/v1/currency/rates")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["base"] == "AED"
    assert data["rates"]["USD"] == 0.27


@pytest.mark.asyncio
async def test_format(client: AsyncClient):
    response = await client.get("/api/v1/currency/format", params={"price": 1_000_000, "currency": "usd"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["formatted"] == "USD 270,000"
    assert data["currency"] == "USD"
    assert data["amount"] == 270000


@pytest.mark.asyncio
async def test_format_unsupported_currency(client: AsyncClient):
    response = await client.get("/api/v1/currency/format", params={"price": 10, "currency": "GBP"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_preference_defaults_then_updates(client: AsyncClient):
    response = await client.get("/api/v1/currency/preferences/user-1")
    assert response.json()["data"]["currency"] == "AED"

    response = await client.put("/api/v1/currency/preferences/user-1", json={"currency": "usd"})
    assert response.status_code == 200
    assert response.json()["data"]["currency"] == "USD"

    response = await client.get("/api/v1/currency/preferences/user-1")
    assert response.json()["data"]["currency"] == "USD"

    response = await client.put("/api/v1/currency/preferences/user-1", json={"currency": "EUR"})
    assert response.json()["data"]["currency"] == "EUR"


@pytest.mark.asyncio
async def test_preference_rejects_unsupported(client: AsyncClient):
    response = await client.put("/api/v1/currency/preferences/user-1", json={"currency": "JPY"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["data"]["status"] in ("healthy", "unhealthy")


@pytest.mark.asyncio
async def test_format_infinite_price(client: AsyncClient):
    response = await client.get("/api/v1/currency/format", params={"price": "inf", "currency": "USD"})
    assert response.status_code == 422
