"""
Level API tests.

Tests cover:
- Creating roots and children (Admin only; members and outsiders are rejected)
- Parent must exist in the same organization
- Sibling names are unique per parent
- Single-level expansion: children by name, parent, organization
- Root listing by name and the nested forest
- Re-parenting: to another parent, to the root, and the cycle guard
"""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import func
from sqlmodel import select

from conftest import auth_headers
from planner_server.models.level import Level


@pytest.fixture
def create_level(client):
    async def _create(user, org_id: str, name: str, parent_id: str | None = None) -> dict:
        resp = await client.post(
            "/api/v1/levels",
            json={"name": name, "organization_id": org_id, "parent_id": parent_id},
            headers=auth_headers(user),
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


async def _level_count(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(Level))
        return result.scalar_one()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreateLevel:
    @pytest.mark.asyncio
    async def test_root_and_child(self, client: AsyncClient, alice, create_org, create_level):
        org = await create_org(alice)
        root = await create_level(alice, org["id"], "Building A")
        child = await create_level(alice, org["id"], "Floor 1", root["id"])

        assert root["parent_id"] is None
        assert root["organization_id"] == org["id"]
        assert child["parent_id"] == root["id"]

    @pytest.mark.asyncio
    async def test_non_member_forbidden(
        self, client: AsyncClient, alice, bob, create_org, session_factory
    ):
        org = await create_org(alice)
        resp = await client.post(
            "/api/v1/levels",
            json={"name": "Sneaky", "organization_id": org["id"]},
            headers=auth_headers(bob),
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["reason"] == "NOT_A_MEMBER"
        assert await _level_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_member_forbidden(
        self, client: AsyncClient, alice, bob, create_org, add_member, session_factory
    ):
        org = await create_org(alice)
        await add_member(alice, org["id"], bob, "MEMBER")
        resp = await client.post(
            "/api/v1/levels",
            json={"name": "Nope", "organization_id": org["id"]},
            headers=auth_headers(bob),
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["reason"] == "INSUFFICIENT_ROLE"
        assert await _level_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_parent_from_other_org(
        self, client: AsyncClient, alice, create_org, create_level, session_factory
    ):
        org_a = await create_org(alice, "A")
        org_b = await create_org(alice, "B")
        foreign = await create_level(alice, org_b["id"], "Foreign")

        resp = await client.post(
            "/api/v1/levels",
            json={"name": "X", "organization_id": org_a["id"], "parent_id": foreign["id"]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_PARENT"
        assert await _level_count(session_factory) == 1

    @pytest.mark.asyncio
    async def test_nonexistent_parent(self, client: AsyncClient, alice, create_org):
        org = await create_org(alice)
        resp = await client.post(
            "/api/v1/levels",
            json={"name": "X", "organization_id": org["id"], "parent_id": str(uuid.uuid4())},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_PARENT"

    @pytest.mark.asyncio
    async def test_blank_name(self, client: AsyncClient, alice, create_org):
        org = await create_org(alice)
        resp = await client.post(
            "/api/v1/levels",
            json={"name": "  ", "organization_id": org["id"]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_sibling_name_conflict(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice)
        root = await create_level(alice, org["id"], "Root")
        await create_level(alice, org["id"], "Child", root["id"])

        resp = await client.post(
            "/api/v1/levels",
            json={"name": "Child", "organization_id": org["id"], "parent_id": root["id"]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 409

        resp = await client.post(
            "/api/v1/levels",
            json={"name": "Root", "organization_id": org["id"]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_same_name_under_different_parents(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice)
        a = await create_level(alice, org["id"], "A")
        b = await create_level(alice, org["id"], "B")
        await create_level(alice, org["id"], "Floor 1", a["id"])
        await create_level(alice, org["id"], "Floor 1", b["id"])


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

class TestGetLevel:
    @pytest.mark.asyncio
    async def test_detail_with_children_parent_and_org(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice, "Acme")
        root = await create_level(alice, org["id"], "Root")
        mid = await create_level(alice, org["id"], "Mid", root["id"])
        await create_level(alice, org["id"], "Zulu", mid["id"])
        await create_level(alice, org["id"], "Alpha", mid["id"])

        resp = await client.get(f"/api/v1/levels/{mid['id']}", headers=auth_headers(alice))
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Mid"
        assert [c["name"] for c in data["children"]] == ["Alpha", "Zulu"]
        assert data["parent"]["id"] == root["id"]
        assert data["organization"] == {
            "id": org["id"],
            "name": "Acme",
            "owner_id": str(alice.id),
        }

    @pytest.mark.asyncio
    async def test_root_has_no_parent(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice)
        root = await create_level(alice, org["id"], "Root")
        resp = await client.get(f"/api/v1/levels/{root['id']}", headers=auth_headers(alice))
        assert resp.json()["parent"] is None
        assert resp.json()["children"] == []

    @pytest.mark.asyncio
    async def test_member_can_read(
        self, client: AsyncClient, alice, bob, create_org, add_member, create_level
    ):
        org = await create_org(alice)
        await add_member(alice, org["id"], bob, "MEMBER")
        root = await create_level(alice, org["id"], "Root")
        resp = await client.get(f"/api/v1/levels/{root['id']}", headers=auth_headers(bob))
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_non_member_forbidden(
        self, client: AsyncClient, alice, bob, create_org, create_level
    ):
        org = await create_org(alice)
        root = await create_level(alice, org["id"], "Root")
        resp = await client.get(f"/api/v1/levels/{root['id']}", headers=auth_headers(bob))
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, alice):
        resp = await client.get(f"/api/v1/levels/{uuid.uuid4()}", headers=auth_headers(alice))
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Level not found"


class TestListLevels:
    @pytest.mark.asyncio
    async def test_roots_by_name(self, client: AsyncClient, alice, create_org, create_level):
        org = await create_org(alice)
        zeta = await create_level(alice, org["id"], "Zeta")
        await create_level(alice, org["id"], "Alpha")
        await create_level(alice, org["id"], "Child", zeta["id"])

        resp = await client.get(
            f"/api/v1/organizations/{org['id']}/levels", headers=auth_headers(alice)
        )
        assert resp.status_code == 200
        assert [lvl["name"] for lvl in resp.json()] == ["Alpha", "Zeta"]

    @pytest.mark.asyncio
    async def test_roots_forbidden_for_outsider(
        self, client: AsyncClient, alice, bob, create_org
    ):
        org = await create_org(alice)
        resp = await client.get(
            f"/api/v1/organizations/{org['id']}/levels", headers=auth_headers(bob)
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_tree(self, client: AsyncClient, alice, create_org, create_level):
        org = await create_org(alice)
        a = await create_level(alice, org["id"], "A")
        a1 = await create_level(alice, org["id"], "A1", a["id"])
        await create_level(alice, org["id"], "A1x", a1["id"])
        await create_level(alice, org["id"], "B")

        resp = await client.get(
            f"/api/v1/organizations/{org['id']}/levels/tree", headers=auth_headers(alice)
        )
        assert resp.status_code == 200
        forest = resp.json()
        assert [n["name"] for n in forest] == ["A", "B"]
        assert forest[0]["children"][0]["name"] == "A1"
        assert forest[0]["children"][0]["children"][0]["name"] == "A1x"
        assert forest[1]["children"] == []


# ---------------------------------------------------------------------------
# Move
# ---------------------------------------------------------------------------

class TestMoveLevel:
    @pytest.mark.asyncio
    async def test_move_under_other_parent(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice)
        a = await create_level(alice, org["id"], "A")
        b = await create_level(alice, org["id"], "B")
        child = await create_level(alice, org["id"], "Child", a["id"])

        resp = await client.patch(
            f"/api/v1/levels/{child['id']}",
            json={"parent_id": b["id"]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 200
        assert resp.json()["parent_id"] == b["id"]

    @pytest.mark.asyncio
    async def test_move_to_root(self, client: AsyncClient, alice, create_org, create_level):
        org = await create_org(alice)
        a = await create_level(alice, org["id"], "A")
        child = await create_level(alice, org["id"], "Child", a["id"])

        resp = await client.patch(
            f"/api/v1/levels/{child['id']}", json={"parent_id": None}, headers=auth_headers(alice)
        )
        assert resp.status_code == 200
        assert resp.json()["parent_id"] is None

    @pytest.mark.asyncio
    async def test_move_under_descendant_rejected(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice)
        a = await create_level(alice, org["id"], "A")
        a1 = await create_level(alice, org["id"], "A1", a["id"])
        a1x = await create_level(alice, org["id"], "A1x", a1["id"])
        headers = auth_headers(alice)

        resp = await client.patch(
            f"/api/v1/levels/{a['id']}", json={"parent_id": a1x["id"]}, headers=headers
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_PARENT"

        resp = await client.patch(
            f"/api/v1/levels/{a['id']}", json={"parent_id": a["id"]}, headers=headers
        )
        assert resp.status_code == 400

        resp = await client.get(f"/api/v1/levels/{a['id']}", headers=headers)
        assert resp.json()["parent_id"] is None

    @pytest.mark.asyncio
    async def test_move_across_orgs_rejected(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org_a = await create_org(alice, "A")
        org_b = await create_org(alice, "B")
        level = await create_level(alice, org_a["id"], "L")
        foreign = await create_level(alice, org_b["id"], "F")

        resp = await client.patch(
            f"/api/v1/levels/{level['id']}",
            json={"parent_id": foreign["id"]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_move_into_name_clash(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice)
        a = await create_level(alice, org["id"], "A")
        b = await create_level(alice, org["id"], "B")
        await create_level(alice, org["id"], "Same", a["id"])
        other = await create_level(alice, org["id"], "Same", b["id"])

        resp = await client.patch(
            f"/api/v1/levels/{other['id']}",
            json={"parent_id": a["id"]},
            headers=auth_headers(alice),
        )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_member_cannot_move(
        self, client: AsyncClient, alice, bob, create_org, add_member, create_level
    ):
        org = await create_org(alice)
        await add_member(alice, org["id"], bob, "MEMBER")
        a = await create_level(alice, org["id"], "A")
        b = await create_level(alice, org["id"], "B")

        resp = await client.patch(
            f"/api/v1/levels/{b['id']}", json={"parent_id": a["id"]}, headers=auth_headers(bob)
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_parent_id_required(
        self, client: AsyncClient, alice, create_org, create_level
    ):
        org = await create_org(alice)
        a = await create_level(alice, org["id"], "A")
        resp = await client.patch(
            f"/api/v1/levels/{a['id']}", json={}, headers=auth_headers(alice)
        )
        assert resp.status_code == 400
