# tests/api/test_examples.py
SLUGS = ["annual-review", "letter-of-authority", "new-financial-planning-client"]


def test_list_examples(client):
    r = client.get("/examples")
    assert r.status_code == 200, r.text
    items = r.json()
    assert [i["slug"] for i in items] == SLUGS
    assert all(i["name"] and i["description"] for i in items)


def test_get_example(client):
    r = client.get("/examples/annual-review")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["name"] == "Annual Review"
    assert [s["order"] for s in body["stages"]] == list(range(len(body["stages"])))
    assert client.get("/examples/nope").status_code == 404


def test_duplicate_example_into_workflows(client, store):
    r = client.post("/examples/letter-of-authority/duplicate", json={"createdBy": "Ana"})
    assert r.status_code == 201, r.text
    copy = r.json()
    assert copy["name"].endswith("(Copy)")
    assert copy["createdBy"] == "Ana"
    assert store.exists(copy["id"])

    source = client.get("/examples/letter-of-authority").json()
    assert {s["id"] for s in copy["stages"]}.isdisjoint({s["id"] for s in source["stages"]})


def test_duplicate_example_defaults_author(client):
    r = client.post("/examples/annual-review/duplicate")
    assert r.status_code == 201, r.text
    assert r.json()["createdBy"] == "User"
    assert client.post("/examples/nope/duplicate").status_code == 404
