# tests/test_tasks.py — Todo router tests
import pytest
from httpx import AsyncClient


async def _create(client, headers, title="Buy milk", desc="2%", **extra):
    resp = await client.post("/api/todos", json={"title": title, "desc": desc, **extra}, headers=headers)
    assert resp.status_code == 201
    return resp.json()["todo"]


@pytest.mark.asyncio
async def test_requires_authentication(client: AsyncClient):
    resp = await client.get("/api/todos")
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_create_todo(client: AsyncClient, test_user, auth_headers):
    resp = await client.post(
        "/api/todos",
        json={"title": "Buy milk", "desc": "2%"},
        headers=auth_headers(test_user),
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["message"] == "Todo created successfully"
    assert data["todo"]["done"] is False
    assert data["todo"]["user_id"] == test_user.id


@pytest.mark.asyncio
async def test_create_blank_title_is_bad_request(client: AsyncClient, test_user, auth_headers):
    resp = await client.post(
        "/api/todos", json={"title": "   ", "desc": "x"}, headers=auth_headers(test_user),
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Todo title cannot be empty"


@pytest.mark.asyncio
async def test_create_oversized_title_fails_validation(client: AsyncClient, test_user, auth_headers):
    resp = await client.post(
        "/api/todos", json={"title": "x" * 256, "desc": "x"}, headers=auth_headers(test_user),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_own_todo(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)
    todo = await _create(client, headers)
    resp = await client.get(f"/api/todos/{todo['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["todo"]["title"] == "Buy milk"


@pytest.mark.asyncio
async def test_other_users_todo_is_forbidden(client: AsyncClient, test_user, other_user, auth_headers):
    todo = await _create(client, auth_headers(test_user))
    intruder = auth_headers(other_user)

    resp = await client.get(f"/api/todos/{todo['id']}", headers=intruder)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied: This todo belongs to another user"

    assert (await client.put(f"/api/todos/{todo['id']}", json={"title": "x"}, headers=intruder)).status_code == 403
    assert (await client.patch(f"/api/todos/{todo['id']}/toggle", headers=intruder)).status_code == 403
    assert (await client.delete(f"/api/todos/{todo['id']}", headers=intruder)).status_code == 403


@pytest.mark.asyncio
async def test_legacy_todo_is_shared(client: AsyncClient, test_user, other_user, legacy_task, auth_headers):
    for user in (test_user, other_user):
        resp = await client.get(f"/api/todos/{legacy_task.id}", headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.json()["todo"]["user_id"] is None


@pytest.mark.asyncio
async def test_missing_todo_is_not_found(client: AsyncClient, test_user, auth_headers):
    resp = await client.get("/api/todos/9999", headers=auth_headers(test_user))
    assert resp.status_code == 404
    assert resp.json()["message"] == "Todo not found"


@pytest.mark.asyncio
async def test_non_positive_id_rejected(client: AsyncClient, test_user, auth_headers):
    resp = await client.get("/api/todos/0", headers=auth_headers(test_user))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_todo(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)
    todo = await _create(client, headers)
    resp = await client.put(f"/api/todos/{todo['id']}", json={"desc": "whole milk"}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()["todo"]
    assert data["desc"] == "whole milk"
    assert data["title"] == "Buy milk"


@pytest.mark.asyncio
async def test_toggle_round_trip(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)
    todo = await _create(client, headers)

    first = await client.patch(f"/api/todos/{todo['id']}/toggle", headers=headers)
    assert first.status_code == 200
    assert first.json()["todo"]["done"] is True

    second = await client.patch(f"/api/todos/{todo['id']}/toggle", headers=headers)
    assert second.json()["todo"]["done"] is False
    assert second.json()["message"] == "Todo marked as pending"


@pytest.mark.asyncio
async def test_delete_todo(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)
    todo = await _create(client, headers)

    resp = await client.delete(f"/api/todos/{todo['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["deleted_todo"]["id"] == todo["id"]

    assert (await client.get(f"/api/todos/{todo['id']}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_with_status_filter(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)
    await _create(client, headers, title="Open")
    await _create(client, headers, title="Finished", done=True)

    resp = await client.get("/api/todos", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["stats"] == {"total": 2, "completed": 1, "pending": 1}

    resp = await client.get("/api/todos", params={"status": "completed"}, headers=headers)
    assert [t["title"] for t in resp.json()["todos"]] == ["Finished"]

    # Unknown status values fall back to the unfiltered listing
    resp = await client.get("/api/todos", params={"status": "archived"}, headers=headers)
    assert resp.status_code == 200
    assert {t["title"] for t in resp.json()["todos"]} == {"Open", "Finished"}


@pytest.mark.asyncio
async def test_search(client: AsyncClient, test_user, other_user, auth_headers):
    headers = auth_headers(test_user)
    await _create(client, headers, title="Buy milk")
    await _create(client, headers, title="Bread", desc="and milk", done=True)
    await _create(client, auth_headers(other_user), title="milk for the office")

    resp = await client.get("/api/todos/search", params={"q": "milk"}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 2
    assert data["status"] == "all"

    resp = await client.get(
        "/api/todos/search", params={"q": "milk", "status": "completed"}, headers=headers,
    )
    assert [t["title"] for t in resp.json()["todos"]] == ["Bread"]


@pytest.mark.asyncio
async def test_search_requires_term(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)
    assert (await client.get("/api/todos/search", headers=headers)).status_code == 422

    resp = await client.get("/api/todos/search", params={"q": "   "}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Search term cannot be empty"


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)
    await _create(client, headers, done=True)
    await _create(client, headers)

    resp = await client.get("/api/todos/stats", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["stats"] == {"total": 2, "completed": 1, "pending": 1, "completion_rate": 50}


@pytest.mark.asyncio
async def test_admin_listing_open_to_any_user(client: AsyncClient, test_user, other_user, auth_headers):
    await _create(client, auth_headers(test_user))
    await _create(client, auth_headers(other_user))

    resp = await client.get("/api/todos/admin/all", headers=auth_headers(other_user))
    assert resp.status_code == 200
    assert resp.json()["stats"]["total"] == 2


@pytest.mark.asyncio
async def test_length_limits_apply_after_trimming(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)

    resp = await client.post(
        "/api/todos", json={"title": "x" * 255 + "  ", "desc": " d "}, headers=headers,
    )
    assert resp.status_code == 201
    todo = resp.json()["todo"]
    assert todo["title"] == "x" * 255
    assert todo["desc"] == "d"

    resp = await client.put(
        f"/api/todos/{todo['id']}", json={"desc": "  " + "y" * 1000 + " "}, headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["todo"]["desc"] == "y" * 1000

    resp = await client.put(f"/api/todos/{todo['id']}", json={"desc": "y" * 1001}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_search_term_limit_applies_after_trimming(client: AsyncClient, test_user, auth_headers):
    headers = auth_headers(test_user)

    resp = await client.get("/api/todos/search", params={"q": "a" * 255 + " "}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["search_term"] == "a" * 255
    assert resp.json()["count"] == 0

    resp = await client.get("/api/todos/search", params={"q": "a" * 256}, headers=headers)
    assert resp.status_code == 422
