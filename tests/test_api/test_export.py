"""
Tests for CSV export endpoints.
"""

import csv
import io
from datetime import date

import pytest
from httpx import AsyncClient


def _rows(text: str) -> list[dict[str, str]]:
    return list(csv.DictReader(io.StringIO(text, newline="")))


@pytest.mark.asyncio
async def test_export_tags(client: AsyncClient, seeded):
    response = await client.get("/api/v1/export/tags")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == (
        f'attachment; filename="tags-export-{date.today().isoformat()}.csv"'
    )

    text = response.text
    assert text.splitlines()[0] == "name,slug,category,color,sortOrder,boards,assetCount,createdAt"
    assert "\r\n" in text

    rows = {row["slug"]: row for row in _rows(text)}
    assert rows["competitive-intel"]["boards"] == "sales-kit|onboarding"
    assert rows["pricing"]["boards"] == "sales-kit"
    assert rows["go-to-market-enablement"]["boards"] == ""


@pytest.mark.asyncio
async def test_export_tags_quotes_commas(client: AsyncClient, seeded):
    """A name containing a comma survives a CSV round trip."""
    response = await client.get("/api/v1/export/tags")

    assert '"Go-To-Market, Enablement"' in response.text
    names = [row["name"] for row in _rows(response.text)]
    assert "Go-To-Market, Enablement" in names


@pytest.mark.asyncio
async def test_export_tags_quotes_embedded_quotes(client: AsyncClient):
    created = await client.post(
        "/api/v1/tags",
        json={"name": 'The "Big" Deal', "slug": "big-deal"},
    )
    assert created.status_code == 201

    response = await client.get("/api/v1/export/tags")

    assert '"The ""Big"" Deal"' in response.text
    assert _rows(response.text)[0]["name"] == 'The "Big" Deal'


@pytest.mark.asyncio
async def test_export_boards(client: AsyncClient, seeded):
    response = await client.get("/api/v1/export/boards")

    assert response.status_code == 200
    assert "boards-export-" in response.headers["content-disposition"]

    rows = _rows(response.text)
    assert [row["slug"] for row in rows] == ["sales-kit", "onboarding", "events"]
    assert rows[0]["tags"] == "pricing|competitive-intel"
    assert rows[0]["assetCount"] == "3"
    assert rows[2]["icon"] == ""
    assert list(rows[0].keys()) == [
        "name", "slug", "icon", "color", "lightColor", "accentColor",
        "sortOrder", "tags", "assetCount", "createdAt",
    ]
