from fastapi.testclient import TestClient
from kempoverse.main import app

client = TestClient(app)

def auth():
    tok = client.post("/api/auth/login", json={"password": "test-password"}).json()["data"]["token"]
    return {"Authorization": f"Bearer {tok}"}

def make_entry(H, **overrides):
    body = {
        "title": "Kempo 6: Leg Hawk",
        "category": "technique",
        "subcategory": "Kempos",
        "belts": ["Green"],
        "tags": ["haymaker"],
        "content_md": "Step back into a horse stance.",
        "references": ["https://example.com/leg-hawk"],
    }
    body.update(overrides)
    r = client.post("/api/entries", headers=H, json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]

def titles(resp):
    return [e["title"] for e in resp.json()["data"]["entries"]]


def test_create_get_roundtrip():
    H = auth()
    e = make_entry(H, video_url="https://video.example/1", image_urls=["/media/x/1.png"])
    assert e["id"] and e["created_at"] and e["updated_at"]
    assert e["references"] == ["https://example.com/leg-hawk"]

    r = client.get(f"/api/entries/{e['id']}")
    assert r.status_code == 200
    got = r.json()["data"]
    assert got["title"] == "Kempo 6: Leg Hawk"
    assert got["belts"] == ["Green"]
    assert got["tags"] == ["haymaker"]
    assert got["video_url"] == "https://video.example/1"
    assert got["image_urls"] == ["/media/x/1.png"]
    assert set(r.json()) == {"data"}

def test_create_validation_400():
    H = auth()
    r = client.post("/api/entries", headers=H, json={"title": "x", "category": "technique", "tags": [], "content_md": ""})
    assert r.status_code == 400
    assert "tag" in r.json()["error"]

    r = client.post("/api/entries", headers=H, json={"title": "x", "category": "karate", "tags": ["a"], "content_md": ""})
    assert r.status_code == 400
    assert "category" in r.json()["error"]

    r = client.post("/api/entries", headers=H, json={"title": "   ", "category": "form", "tags": ["a"], "content_md": ""})
    assert r.status_code == 400

def test_blank_tags_are_dropped():
    e = make_entry(auth(), tags=["  kick ", "", "block"])
    assert e["tags"] == ["kick", "block"]

def test_get_missing_404():
    r = client.get("/api/entries/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"error": "Entry not found"}

def test_partial_update_only_touches_given_fields():
    H = auth()
    e = make_entry(H)
    r = client.put(f"/api/entries/{e['id']}", headers=H, json={"title": "Leg Hawk (revised)"})
    assert r.status_code == 200
    up = r.json()["data"]
    assert up["title"] == "Leg Hawk (revised)"
    assert up["tags"] == e["tags"]
    assert up["content_md"] == e["content_md"]
    assert up["subcategory"] == "Kempos"
    assert up["updated_at"] != e["updated_at"]
    assert up["created_at"] == e["created_at"]

def test_update_null_clears_optional_column():
    H = auth()
    e = make_entry(H)
    up = client.put(f"/api/entries/{e['id']}", headers=H, json={"subcategory": None, "belts": None}).json()["data"]
    assert up["subcategory"] is None
    assert up["belts"] is None

def test_update_rejects_empty_and_null_required():
    H = auth()
    e = make_entry(H)
    r = client.put(f"/api/entries/{e['id']}", headers=H, json={})
    assert r.status_code == 400
    assert r.json()["error"] == "No fields to update"

    r = client.put(f"/api/entries/{e['id']}", headers=H, json={"title": None})
    assert r.status_code == 400
    assert "title cannot be null" in r.json()["error"]

    r = client.put(f"/api/entries/{e['id']}", headers=H, json={"tags": []})
    assert r.status_code == 400

def test_update_missing_404():
    r = client.put("/api/entries/nope", headers=auth(), json={"title": "x"})
    assert r.status_code == 404

def test_delete_then_404():
    H = auth()
    e = make_entry(H)
    r = client.delete(f"/api/entries/{e['id']}", headers=H)
    assert r.status_code == 200
    assert r.json() == {"data": {"success": True}}
    assert client.get(f"/api/entries/{e['id']}").status_code == 404
    assert client.delete(f"/api/entries/{e['id']}", headers=H).status_code == 404

def test_list_newest_update_first():
    H = auth()
    a = make_entry(H, title="A")
    make_entry(H, title="B")
    client.put(f"/api/entries/{a['id']}", headers=H, json={"content_md": "edited"})
    r = client.get("/api/entries")
    assert titles(r) == ["A", "B"]
    assert r.json()["data"]["total"] == 2

def test_list_filters():
    H = auth()
    make_entry(H, title="Leg Hawk", category="technique", tags=["club-defense"], belts=["Brown 3rd"])
    make_entry(H, title="Short Form 1", category="form", tags=["kata"], belts=["Yellow"])
    make_entry(H, title="History of Kempo", category="history", tags=["lineage"], belts=None)

    assert titles(client.get("/api/entries", params={"category": "form"})) == ["Short Form 1"]
    assert titles(client.get("/api/entries", params={"tag": "CLUB"})) == ["Leg Hawk"]
    assert titles(client.get("/api/entries", params={"belt": "brown"})) == ["Leg Hawk"]
    assert titles(client.get("/api/entries", params={"category": "form", "tag": "club"})) == []
    assert client.get("/api/entries", params={"category": "karate"}).status_code == 400

def test_search_ranks_by_relevance():
    H = auth()
    make_entry(H, title="Content only", tags=["misc"], content_md="finish with a hawk strike")
    make_entry(H, title="Tag match", tags=["hawk-strike"], content_md="nothing here")
    make_entry(H, title="Leg Hawk", tags=["misc"], content_md="nothing here")
    make_entry(H, title="Unrelated", tags=["misc"], content_md="nothing here")

    r = client.get("/api/entries", params={"q": "hawk"})
    assert titles(r) == ["Leg Hawk", "Tag match", "Content only"]
    # legacy alias
    assert titles(client.get("/api/entries", params={"search": "hawk"})) == titles(r)
    # tag filter still applies after search
    assert titles(client.get("/api/entries", params={"q": "hawk", "tag": "hawk"})) == ["Tag match"]
    assert titles(client.get("/api/entries", params={"q": "zebra"})) == []

def test_all_tags_sorted_unique():
    H = auth()
    make_entry(H, tags=["takedown", "haymaker"])
    make_entry(H, tags=["haymaker", "block"])
    assert client.get("/api/entries/tags").json() == {"data": ["block", "haymaker", "takedown"]}

def test_postgres_fulltext_statement():
    from sqlalchemy.dialects import postgresql
    from kempoverse.repositories.entry_repo import fulltext_search_stmt

    compiled = fulltext_search_stmt("leg hawk").compile(dialect=postgresql.dialect())
    sql = str(compiled)
    assert "to_tsvector" in sql
    assert "plainto_tsquery" in sql
    assert "@@" in sql
    assert "ORDER BY ts_rank(" in sql and "DESC" in sql
    assert "concat_ws" in sql
    assert "leg hawk" in compiled.params.values()
    assert "english" in compiled.params.values()

def test_search_uses_fulltext_on_postgres(db, monkeypatch):
    from kempoverse.models import Category
    from kempoverse.repositories.entry_repo import EntryRepository

    repo = EntryRepository(db)
    hit = repo.create(title="Leg Hawk", category=Category.technique, tags=["kick"], belts=["Green"], content_md="")
    miss = repo.create(title="Leg Hawk II", category=Category.technique, tags=["kick"], belts=["Brown"], content_md="")
    seen = []

    class PgBind:
        class dialect:
            name = "postgresql"

    monkeypatch.setattr(db, "get_bind", lambda *a, **kw: PgBind())
    monkeypatch.setattr(repo, "_search_postgres", lambda q: seen.append(q) or [hit, miss])
    assert repo.search("leg hawk", belt="green") == [hit]
    assert seen == ["leg hawk"]
