"""
Tests for tag endpoints.
"""

import pytest
from httpx import AsyncClient

from app.core.exceptions import ValidationException
from app.schemas.tag import TagCreate
from app.services.tag_service import TagService


@pytest.mark.asyncio
async def test_list_tags_empty(client: AsyncClient):
    """Test listing tags when database is empty."""
    response = await client.get("/api/v1/tags")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_tags_with_counts(client: AsyncClient, seeded):
    response = await client.get("/api/v1/tags")

    assert response.status_code == 200
    tags = {tag["slug"]: tag for tag in response.json()}
    assert tags["competitive-intel"]["boardCount"] == 2
    assert tags["pricing"]["boardCount"] == 1
    assert tags["go-to-market-enablement"]["boardCount"] == 0
    # Asset counts come from the asset tag index, empty until synced
    assert all(tag["assetCount"] == 0 for tag in tags.values())


@pytest.mark.asyncio
async def test_create_tag_derives_slug(client: AsyncClient):
    response = await client.post("/api/v1/tags", json={"name": "Voice of Customer"})

    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "voice-of-customer"
    assert data["sortOrder"] == 0
    assert data["createdAt"] is not None


@pytest.mark.asyncio
async def test_create_tag_duplicate_slug(client: AsyncClient):
    """A second tag deriving the same slug is rejected."""
    first = await client.post("/api/v1/tags", json={"name": "Case Studies"})
    assert first.status_code == 201

    second = await client.post("/api/v1/tags", json={"name": "case   studies"})

    assert second.status_code == 409
    assert second.json()["error"] == "conflict"

    tags = (await client.get("/api/v1/tags")).json()
    assert len(tags) == 1


@pytest.mark.asyncio
async def test_create_tag_requires_name(client: AsyncClient):
    response = await client.post("/api/v1/tags", json={"color": "#000000"})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "name"


@pytest.mark.asyncio
async def test_create_tag_unusable_name(client: AsyncClient):
    response = await client.post("/api/v1/tags", json={"name": "!!!"})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_failed"


@pytest.mark.asyncio
async def test_create_tag_rejects_malformed_slug(client: AsyncClient):
    """Supplied slugs must already be lowercase letters, digits and hyphens."""
    response = await client.post(
        "/api/v1/tags",
        json={"name": "Sales Ops", "slug": "Sales Ops/2026?"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "validation_failed"
    assert data["details"][0]["field"] == "slug"

    assert (await client.get("/api/v1/tags")).json() == []


@pytest.mark.asyncio
async def test_create_tag_accepts_explicit_slug(client: AsyncClient):
    response = await client.post(
        "/api/v1/tags",
        json={"name": "Sales Ops", "slug": "sales-ops-2026"},
    )

    assert response.status_code == 201
    assert response.json()["slug"] == "sales-ops-2026"


@pytest.mark.asyncio
async def test_tag_service_rejects_malformed_slug(db_session):
    """The service checks slugs even when the request model was bypassed."""
    service = TagService(db_session)

    with pytest.raises(ValidationException):
        await service.create(TagCreate.model_construct(name="Sales Ops", slug="Sales Ops/2026?"))


@pytest.mark.asyncio
async def test_get_tag(client: AsyncClient, seeded):
    response = await client.get("/api/v1/tags/pricing")

    assert response.status_code == 200
    assert response.json()["category"] == "commercial"


@pytest.mark.asyncio
async def test_update_tag(client: AsyncClient, seeded):
    response = await client.put(
        "/api/v1/tags/pricing",
        json={"name": "Pricing Strategy", "color": "#111111"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Pricing Strategy"
    assert data["slug"] == "pricing"
    assert data["category"] == "commercial"


@pytest.mark.asyncio
async def test_update_tag_name_conflict(client: AsyncClient, seeded):
    response = await client.put("/api/v1/tags/pricing", json={"name": "Competitive Intel"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_tag_cascades(client: AsyncClient, seeded):
    """Deleting a tag removes it from every board, then it is gone."""
    response = await client.delete("/api/v1/tags/competitive-intel")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["deleted"]["slug"] == "competitive-intel"

    assert (await client.get("/api/v1/tags/competitive-intel")).status_code == 404

    for board in (await client.get("/api/v1/boards")).json():
        assert "competitive-intel" not in [t["slug"] for t in board["tags"]]


@pytest.mark.asyncio
async def test_delete_tag_not_found(client: AsyncClient):
    response = await client.delete("/api/v1/tags/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_tag_boards(client: AsyncClient, seeded):
    response = await client.get("/api/v1/tags/competitive-intel/boards")

    assert response.status_code == 200
    assert [b["slug"] for b in response.json()] == ["sales-kit", "onboarding"]
