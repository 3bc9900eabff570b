# tests/test_users.py
import asyncio

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from jobjournal.core.security import verify_password
from jobjournal.repositories.users import UserRepository

USERNAME = "User"
PASSWORD = "Pass"


@pytest.mark.asyncio
async def test_register_rejects_missing_username(client):
    r = await client.post("/users", json={"password": PASSWORD})
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == 422
    assert body["reason"] == "ValidationError"
    assert body["message"] == "Missing field"
    assert body["location"] == "username"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, message, location",
    [
        ({"username": USERNAME}, "Missing field", "password"),
        ({"username": 1234, "password": PASSWORD}, "Incorrect field type: expected string", "username"),
        ({"username": USERNAME, "password": 1234}, "Incorrect field type: expected string", "password"),
        ({"username": f" {USERNAME} ", "password": PASSWORD}, "Cannot start or end with whitespace", "username"),
        ({"username": USERNAME, "password": f" {PASSWORD} "}, "Cannot start or end with whitespace", "password"),
        ({"username": "", "password": PASSWORD}, "Must be at least 3 characters long", "username"),
        ({"username": USERNAME, "password": "12"}, "Must be at least 3 characters long", "password"),
        ({"username": "x" * 9, "password": PASSWORD}, "Must be at most 8 characters long", "username"),
        ({"username": USERNAME, "password": "x" * 72}, "Must be at most 8 characters long", "password"),
    ],
)
async def test_register_rejects_invalid_fields(client, payload, message, location):
    r = await client.post("/users", json=payload)
    assert r.status_code == 422
    assert r.json()["message"] == message
    assert r.json()["location"] == location


@pytest.mark.asyncio
async def test_register_without_body(client):
    r = await client.post("/users")
    assert r.status_code == 422
    assert r.json()["location"] == "username"


@pytest.mark.asyncio
async def test_register_rejects_duplicate_username(client, register):
    await register(USERNAME, PASSWORD)
    r = await client.post("/users", json={"username": USERNAME, "password": PASSWORD})
    assert r.status_code == 422
    assert r.json() == {
        "code": 422,
        "reason": "ValidationError",
        "message": "Username already taken",
        "location": "username",
    }


@pytest.mark.asyncio
async def test_register_creates_user(client, users_collection):
    r = await client.post("/users", json={"username": USERNAME, "password": PASSWORD})
    assert r.status_code == 201
    user = r.json()
    assert user["username"] == USERNAME
    assert user["skills"] == []
    assert user["jobs"] == []
    assert "password" not in user

    # stored hash, never the plain password
    stored = users_collection.docs[0]
    assert stored["password"] != PASSWORD
    assert verify_password(PASSWORD, stored["password"])

    r2 = await client.get(f"/users/{user['id']}")
    assert r2.status_code == 200
    assert r2.json()["username"] == USERNAME


@pytest.mark.asyncio
async def test_list_and_find_users(client, register):
    await register("UserA", PASSWORD)
    await register("UserB", PASSWORD)

    r = await client.get("/users")
    assert r.status_code == 200
    assert sorted(u["username"] for u in r.json()) == ["UserA", "UserB"]

    r2 = await client.get("/users/user", params={"username": "UserB"})
    assert r2.status_code == 200
    assert [u["username"] for u in r2.json()] == ["UserB"]

    r3 = await client.get("/users/user", params={"username": "nobody"})
    assert r3.json() == []


@pytest.mark.asyncio
async def test_get_unknown_user(client):
    r = await client.get(f"/users/{ObjectId()}")
    assert r.status_code == 404
    assert r.json() == {"message": "Not Found"}

    r2 = await client.get("/users/not-an-object-id")
    assert r2.status_code == 404


@pytest.mark.asyncio
async def test_edit_user(client, register, users_collection):
    user = await register(USERNAME, PASSWORD)
    r = await client.put(f"/users/{user['id']}", json={"id": user["id"], "username": "Renamed", "password": "newpw"})
    assert r.status_code == 204

    fetched = (await client.get(f"/users/{user['id']}")).json()
    assert fetched["username"] == "Renamed"
    assert verify_password("newpw", users_collection.docs[0]["password"])


@pytest.mark.asyncio
async def test_edit_user_rules(client, register):
    user = await register(USERNAME, PASSWORD)
    await register("Other", PASSWORD)

    r = await client.put(f"/users/{user['id']}", json={"id": "something-else"})
    assert r.status_code == 400
    assert "must match" in r.json()["message"]

    r2 = await client.put(f"/users/{user['id']}", json={"id": user["id"], "username": "Other"})
    assert r2.status_code == 422
    assert r2.json()["message"] == "Username already taken"

    r3 = await client.put(f"/users/{user['id']}", json={"id": user["id"], "password": " pw "})
    assert r3.status_code == 422
    assert r3.json()["location"] == "password"

    # keeping one's own username is not a clash
    r4 = await client.put(f"/users/{user['id']}", json={"id": user["id"], "username": USERNAME})
    assert r4.status_code == 204


@pytest.mark.asyncio
async def test_delete_user(client, register):
    user = await register(USERNAME, PASSWORD)
    r = await client.delete(f"/users/{user['id']}")
    assert r.status_code == 204
    assert (await client.get(f"/users/{user['id']}")).status_code == 404
    assert (await client.delete(f"/users/{user['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_concurrent_registrations_keep_username_unique(client, users_collection, monkeypatch):
    count = users_collection.count_documents

    async def slow_count(query):
        # both requests pass the pre-check before either inserts
        n = await count(query)
        await asyncio.sleep(0.05)
        return n

    monkeypatch.setattr(users_collection, "count_documents", slow_count)
    body = {"username": "Dup", "password": PASSWORD}
    r1, r2 = await asyncio.gather(client.post("/users", json=body), client.post("/users", json=body))

    assert sorted([r1.status_code, r2.status_code]) == [201, 422]
    rejected = r1 if r1.status_code == 422 else r2
    assert rejected.json()["message"] == "Username already taken"
    assert rejected.json()["location"] == "username"
    assert len(users_collection.docs) == 1


@pytest.mark.asyncio
async def test_duplicate_key_on_insert_is_username_taken(client, users_collection, monkeypatch):
    async def duplicate_insert(doc):
        raise DuplicateKeyError("E11000 duplicate key error on username", code=11000)

    monkeypatch.setattr(users_collection, "insert_one", duplicate_insert)
    r = await client.post("/users", json={"username": USERNAME, "password": PASSWORD})
    assert r.status_code == 422
    assert r.json() == {
        "code": 422,
        "reason": "ValidationError",
        "message": "Username already taken",
        "location": "username",
    }


@pytest.mark.asyncio
async def test_duplicate_key_on_rename_is_username_taken(client, register, users_collection, monkeypatch):
    user = await register(USERNAME, PASSWORD)
    await register("Other", PASSWORD)

    async def no_matches(query):
        return 0

    # only the unique index stands between the rename and a duplicate
    monkeypatch.setattr(users_collection, "count_documents", no_matches)
    r = await client.put(f"/users/{user['id']}", json={"id": user["id"], "username": "Other"})
    assert r.status_code == 422
    assert r.json()["message"] == "Username already taken"
    assert sorted(d["username"] for d in users_collection.docs) == ["Other", USERNAME]


@pytest.mark.asyncio
async def test_ensure_indexes_declares_unique_username(users_collection):
    await UserRepository(users_collection).ensure_indexes()
    assert users_collection.unique_keys == ["username"]
