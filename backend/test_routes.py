import inspect

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from app.db.repository import ArchitectureRepository
from app.db.session import SessionLocal
from app.editor.registry import EditorRegistry, get_editor_registry
from app.main import app

from conftest import FULL_ENDPOINTS, FULL_SCHEMA


@pytest.fixture
def client(db):
    registry = EditorRegistry(ArchitectureRepository(SessionLocal))
    app.dependency_overrides[get_editor_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def graph_id(client):
    response = client.post("/architectures/generate", json={
        "schema_input": FULL_SCHEMA,
        "endpoint_input": FULL_ENDPOINTS,
        "project_name": "Shop",
        "project_id": "proj-1",
    })
    assert response.status_code == 200
    return response.json()["architecture"]["id"]


def test_generate(client):
    response = client.post("/architectures/generate", json={})

    body = response.json()
    assert body["status"] == "success"
    assert len(body["architecture"]["nodes"]) == 10
    assert body["session"]["dirty"] is False


def test_unknown_graph_is_404(client):
    assert client.get("/architectures/arch-missing").status_code == 404
    assert client.post("/architectures/arch-missing/nodes", json={"type": "cache"}).status_code == 404


def test_node_lifecycle(client, graph_id):
    added = client.post(f"/architectures/{graph_id}/nodes", json={"type": "queue", "name": "Jobs"}).json()
    node_id = added["node"]["id"]
    assert added["session"]["dirty"] is True

    edited = client.patch(f"/architectures/{graph_id}/nodes/{node_id}", json={"name": "Work Queue"}).json()
    assert edited["node"]["data"]["name"] == "Work Queue"

    copy = client.post(f"/architectures/{graph_id}/nodes/{node_id}/duplicate").json()
    assert copy["node"]["data"]["name"] == "Work Queue Copy"

    assert client.delete(f"/architectures/{graph_id}/nodes/{node_id}").json()["status"] == "success"
    assert client.delete(f"/architectures/{graph_id}/nodes/{node_id}").json()["status"] == "noop"


def test_unknown_node_type_is_noop(client, graph_id):
    assert client.post(f"/architectures/{graph_id}/nodes", json={"type": "mainframe"}).json()["status"] == "noop"


def test_connect_replaces_and_relabels(client, graph_id):
    edge = client.post(f"/architectures/{graph_id}/connections", json={
        "source": "database-1", "target": "api-users", "label": "Read",
    }).json()["edge"]

    snapshot = client.get(f"/architectures/{graph_id}").json()["architecture"]
    pair_edges = [e for e in snapshot["edges"] if {e["source"], e["target"]} == {"database-1", "api-users"}]
    assert [e["id"] for e in pair_edges] == [edge["id"]]

    relabeled = client.patch(f"/architectures/{graph_id}/edges/{edge['id']}", json={"label": "Reads"}).json()
    assert relabeled["edge"]["label"] == "Reads"
    assert client.delete(f"/architectures/{graph_id}/edges/{edge['id']}").json()["status"] == "success"


def test_self_loop_is_noop(client, graph_id):
    response = client.post(f"/architectures/{graph_id}/connections", json={"source": "cdn-1", "target": "cdn-1"})

    assert response.json()["status"] == "noop"


def test_canvas_and_drag(client, graph_id):
    canvas = client.get(f"/architectures/{graph_id}/canvas", params={"show_edges": False}).json()["canvas"]
    assert canvas["edges"] == []
    assert canvas["stats"] == {"components": 15, "connections": 0}

    dragging = client.post(f"/architectures/{graph_id}/node-changes", json={"changes": [
        {"type": "position", "id": "cdn-1", "position": {"x": 1, "y": 2}, "dragging": True},
    ]}).json()
    assert dragging["status"] == "noop"

    done = client.post(f"/architectures/{graph_id}/node-changes", json={"changes": [
        {"type": "position", "id": "cdn-1", "dragging": False},
    ]}).json()
    assert done["committed"] == 1

    node = next(n for n in client.get(f"/architectures/{graph_id}").json()["architecture"]["nodes"] if n["id"] == "cdn-1")
    assert node["position"] == {"x": 1.0, "y": 2.0}


def test_templates(client, graph_id):
    assert {t["id"] for t in client.get("/templates").json()["templates"]} == {"simple-web-app", "microservices"}

    applied = client.post(f"/architectures/{graph_id}/templates/simple-web-app").json()
    assert len(applied["nodes_added"]) == 3
    assert client.post(f"/architectures/{graph_id}/templates/nope").json()["status"] == "noop"


def test_save_then_list_and_reload(client, graph_id):
    client.post(f"/architectures/{graph_id}/nodes", json={"type": "cache"})

    saved = client.post(f"/architectures/{graph_id}/save").json()
    assert saved["status"] == "success"
    assert saved["session"]["dirty"] is False

    listed = client.get("/projects/proj-1/architectures").json()["architectures"]
    assert [a["id"] for a in listed] == [graph_id]
    assert listed[0]["nodes"] == 16


def test_export_and_validate(client, graph_id):
    exported = client.get(f"/architectures/{graph_id}/export").json()["export"]
    assert set(exported["edges"][0]) == {"id", "source", "target", "label"}

    validation = client.get(f"/architectures/{graph_id}/validate").json()["validation"]
    assert validation["is_valid"] is True


def test_project_association_and_cleanup(client, graph_id):
    client.post(f"/architectures/{graph_id}/save")

    assert client.put(f"/architectures/{graph_id}/project", json={"project_id": "proj-9"}).status_code == 200
    assert client.put("/architectures/arch-missing/project", json={"project_id": "proj-9"}).status_code == 404

    removed = client.post("/projects/cleanup", json={"valid_project_ids": ["proj-1"]}).json()["removed"]
    assert removed == 1
    assert client.get("/projects/proj-9/architectures").json()["architectures"] == []


def test_stored_graph_reopens_after_sessions_are_dropped(client, graph_id):
    client.post(f"/architectures/{graph_id}/save")
    registry = app.dependency_overrides[get_editor_registry]()
    registry.clear()

    body = client.get(f"/architectures/{graph_id}").json()

    assert body["architecture"]["id"] == graph_id
    assert body["session"]["dirty"] is False
    assert graph_id in registry.sessions


def test_graph_handlers_run_on_the_event_loop():
    handlers = [
        route for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/architectures")
    ]

    assert handlers
    assert [r.path for r in handlers if not inspect.iscoroutinefunction(r.endpoint)] == []
