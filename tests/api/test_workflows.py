# tests/api/test_workflows.py
import json

BASIC = {"name": "Annual Review", "description": "Yearly client review", "createdBy": "Ana"}


def create(client, body=None):
    resp = client.post("/workflows", json=body or BASIC)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_basic_workflow(client):
    data = create(client)
    assert data["id"].startswith("wf_")
    assert data["stages"] == []
    assert data["createdBy"] == "Ana"
    assert data["createdAt"] == data["updatedAt"]


def test_create_requires_all_fields(client):
    resp = client.post("/workflows", json={"name": "x", "description": ""})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION"
    assert error["message"] == "Missing required fields: description, createdBy"


def test_create_full_workflow_for_duplication(client, make_workflow):
    doc = json.loads(make_workflow(workflow_id="wf_dup").model_dump_json(by_alias=True))
    first = create(client, doc)
    assert first["id"] == "wf_dup"
    assert first["createdAt"] != doc["createdAt"]

    # same id again: stored under a new id instead of overwriting
    second = create(client, doc)
    assert second["id"] != "wf_dup"
    assert len(client.get("/workflows").json()) == 2


def test_list_returns_summaries(client):
    a = create(client)["id"]
    b = create(client, {**BASIC, "name": "Onboarding"})["id"]
    items = client.get("/workflows").json()
    assert {i["id"] for i in items} == {a, b}
    assert set(items[0]) == {"id", "name", "description", "createdBy", "createdAt", "updatedAt"}


def test_get_workflow_found_and_not_found(client):
    wid = create(client)["id"]
    assert client.get(f"/workflows/{wid}").json()["name"] == "Annual Review"

    resp = client.get("/workflows/wf_missing")
    assert resp.status_code == 404
    assert resp.json().get("detail") == "Workflow not found"


def test_put_merges_and_keeps_id(client, make_workflow):
    wid = create(client)["id"]
    stages = json.loads(make_workflow().model_dump_json(by_alias=True))["stages"]

    resp = client.put(f"/workflows/{wid}", json={"id": "wf_other", "stages": stages})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["id"] == wid
    assert data["name"] == "Annual Review"
    assert [s["id"] for s in data["stages"]] == ["stage-A", "stage-B", "stage-C"]
    assert data["updatedAt"] >= data["createdAt"]


def test_put_unknown_and_invalid(client):
    assert client.put("/workflows/wf_missing", json={"name": "x"}).status_code == 404

    wid = create(client)["id"]
    resp = client.put(f"/workflows/{wid}", json={"stages": [{"description": "no name"}]})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION"


def test_delete(client):
    wid = create(client)["id"]
    resp = client.delete(f"/workflows/{wid}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Workflow deleted successfully"}
    assert client.delete(f"/workflows/{wid}").status_code == 404
    assert client.get(f"/workflows/{wid}").status_code == 404


def test_export_sets_download_filename(client):
    wid = create(client, {**BASIC, "name": "Annual Review: 2024!"})["id"]
    resp = client.get(f"/workflows/{wid}/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.headers["content-disposition"] == 'attachment; filename="annual_review__2024_.json"'
    assert resp.json()["id"] == wid
    assert client.get("/workflows/wf_missing/export").status_code == 404


def test_export_filename_with_non_ascii_name(client):
    wid = create(client, {**BASIC, "name": "Yıllık Değerlendirme ſ"})["id"]
    resp = client.get(f"/workflows/{wid}/export")
    assert resp.status_code == 200, resp.text
    assert resp.headers["content-disposition"] == 'attachment; filename="y_ll_k_de_erlendirme__.json"'
    assert resp.json()["name"] == "Yıllık Değerlendirme ſ"


def test_import_round_trip(client, make_workflow):
    source = json.loads(make_workflow().model_dump_json(by_alias=True))
    resp = client.post("/workflows/import", json=source)
    assert resp.status_code == 201, resp.text
    imported = resp.json()

    assert imported["id"] != source["id"]
    assert [s["name"] for s in imported["stages"]] == ["A", "B", "C"]
    assert [s["order"] for s in imported["stages"]] == [0, 1, 2]
    assert not {s["id"] for s in imported["stages"]} & {s["id"] for s in source["stages"]}

    exported = client.get(f"/workflows/{imported['id']}/export").json()
    assert exported["stages"][1]["tasks"][0]["title"] == "B1"


def test_import_rejects_missing_fields(client):
    resp = client.post("/workflows/import", json={"name": "x", "stages": []})
    assert resp.status_code == 400
    assert "createdBy" in resp.json()["error"]["message"]


def test_import_rejects_non_list_tasks(client):
    body = {**BASIC, "stages": [{"name": "S", "tasks": []}, {"name": "T", "tasks": 5}]}
    resp = client.post("/workflows/import", json=body)
    assert resp.status_code == 400, resp.text
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION"
    assert error["details"] == [{"path": "stages.1.tasks", "msg": "must be a list"}]


def test_request_id_header_and_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.headers.get("X-Request-Id")


def test_openapi_contains_expected_paths(client):
    paths = client.get("/openapi.json").json().get("paths", {})
    for p in ("/workflows", "/workflows/{id}", "/workflows/{id}/export", "/workflows/import"):
        assert p in paths, f"missing OpenAPI path: {p}"
