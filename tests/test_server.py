"""Tests for the HTTP front end."""
from hashlib import sha256

import pytest
from fastapi.testclient import TestClient

from merkle_tree import EMPTY_HASH, MerkleTree
from merklin import TreeState, app, config


def h(data: str) -> str:
    return sha256(data.encode()).hexdigest()


@pytest.fixture
def client(hasher):
    with TestClient(app) as client:
        client.app.state.tree_state = TreeState(
            MerkleTree(hasher, max_entries=3)
        )
        yield client


def test_lifespan_builds_configured_tree():
    with TestClient(app) as client:
        tree = client.app.state.tree_state.tree
        assert tree.max_entries == config.max_entries()
        assert tree.leaves() == 0


def test_empty_tree_summary(client: TestClient):
    response = client.get("/tree")
    assert response.status_code == 200
    assert response.json() == {"hash": EMPTY_HASH, "leaves": 0, "height": 0}


def test_add_and_get_entry(client: TestClient):
    response = client.post("/entries", json={"entry": "a"})
    assert response.status_code == 201
    assert response.json() == {"key": "k0"}

    response = client.get("/entries/k0")
    assert response.status_code == 200
    assert response.json() == {"key": "k0", "hash": h("a")}


def test_get_unknown_entry(client: TestClient):
    response = client.get("/entries/missing")
    assert response.status_code == 404


def test_tree_summary_with_root(client: TestClient):
    client.post("/entries", json={"entry": "a"})
    body = client.get("/tree", params={"include_root": True}).json()
    assert body["leaves"] == 1
    assert body["hash"] == h(h("a"))
    assert body["root"]["left"] == {"key": "k0", "hash": h("a")}


def test_verify_entry(client: TestClient):
    key = client.post("/entries", json={"entry": "a"}).json()["key"]

    response = client.post(f"/entries/{key}/verify", json={"entry": "a"})
    assert response.status_code == 200
    assert response.json() == {"verified": True}

    response = client.post(f"/entries/{key}/verify", json={"entry": "b"})
    assert response.status_code == 409
    assert response.json()["key"] == key


def test_verify_tree(client: TestClient):
    for entry in "abc":
        client.post("/entries", json={"entry": entry})
    assert client.post("/verify").json() == {"verified": True}

    client.app.state.tree_state.tree.root.hash = h("forged")
    response = client.post("/verify")
    assert response.status_code == 409
    assert response.json()["path"] == ""


def test_capacity_exceeded(client: TestClient):
    for entry in "abc":
        assert client.post("/entries", json={"entry": entry}).status_code == 201

    response = client.post("/entries", json={"entry": "d"})
    assert response.status_code == 507
    assert response.json()["max_entries"] == 3
    assert response.json()["leaves"] == 3
    assert client.get("/tree").json()["leaves"] == 3


def test_random_entries(client: TestClient):
    response = client.post("/entries/random", params={"count": 2})
    assert response.status_code == 201
    assert response.json() == {"keys": ["k1", "k3"]}
    assert client.get("/tree").json()["leaves"] == 2


def test_random_entries_past_capacity(client: TestClient):
    client.post("/entries", json={"entry": "a"})

    response = client.post("/entries/random", params={"count": 5})
    assert response.status_code == 507
    assert response.json()["leaves"] == 3
    assert response.json()["max_entries"] == 3

    # the entries that fit stay in the tree
    assert client.get("/tree").json()["leaves"] == 3
    assert client.get("/entries/k2").status_code == 200
    assert client.get("/entries/k4").status_code == 200
    assert client.post("/verify").json() == {"verified": True}


def test_random_entries_requires_positive_count(client: TestClient):
    response = client.post("/entries/random", params={"count": 0})
    assert response.status_code == 422


def test_clear_tree(client: TestClient):
    client.post("/entries", json={"entry": "a"})
    response = client.delete("/tree")
    assert response.status_code == 200
    assert response.json()["leaves"] == 0
    assert client.get("/entries/k0").status_code == 404


def test_validate_config(monkeypatch: pytest.MonkeyPatch):
    config.validate_config()

    monkeypatch.setattr(config, "MAX_ENTRIES", "lots")
    with pytest.raises(RuntimeError):
        config.validate_config()

    monkeypatch.setattr(config, "MAX_ENTRIES", "0")
    with pytest.raises(RuntimeError):
        config.validate_config()

    monkeypatch.setattr(config, "MAX_ENTRIES", "10")
    monkeypatch.setattr(config, "LOG_LEVEL", "chatty")
    with pytest.raises(RuntimeError):
        config.validate_config()
