import json

from fastapi.testclient import TestClient
from promptpad.config import reset_settings
from promptpad.main import app, reset_store

client = TestClient(app)

CSV = (
    "Nombre,Prompt,Notas,Autor,Enlace,Categoria,Fecha\r\n"
    '"Email","Write a polite email, short.","",,"","Work","2024-04-02"\r\n'
    '"Story","Once upon a time\r\nthere was a ""dragon""",,Ana,,Creative,2024-04-01\r\n'
)


def _upload(content: bytes, filename: str = "prompts.csv"):
    files = {"file": (filename, content, "text/csv")}
    return client.post("/import", files=files)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_import_csv(store_path):
    r = _upload(CSV.encode("utf-8"))
    assert r.status_code == 200

    data = r.json()
    assert data["imported"] == 2
    assert data["new_categories"] == ["Work"]
    assert data["categories"] == ["General", "Creative", "Code", "Work"]
    email, story = data["records"]
    assert email["content"] == "Write a polite email, short."
    assert email["author"] == "Anonymous"
    assert story["content"] == 'Once upon a time\r\nthere was a "dragon"'

    saved = json.loads(store_path.read_text(encoding="utf-8"))
    assert [rec["title"] for rec in saved["records"]] == ["Email", "Story"]


def test_import_rejects_non_csv():
    r = _upload(b"whatever", filename="notes.txt")
    assert r.status_code == 422


def test_import_empty_file():
    r = _upload(b"")
    assert r.status_code == 200
    assert r.json()["imported"] == 0


def test_export_empty_store():
    r = client.get("/export")
    assert r.status_code == 204
    assert r.content == b""


def test_export_utf8_bom():
    client.post("/records", json={"title": "Montréal", "content": 'say "oui"', "category": "Code"})

    r = client.get("/export")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="prompts_promptpad.csv"' in r.headers["content-disposition"]
    etag = r.headers["etag"]
    assert etag.startswith('"') and etag.endswith('"')
    assert len(etag) == 66

    assert r.content.startswith(b"\xef\xbb\xbf")
    text = r.content.decode("utf-8-sig")
    assert text.splitlines()[0] == "Title,Content,Notes,Author,Link,Category,Date"
    assert '"Montréal","say ""oui""","","Anonymous","","Code",' in text


def test_records_crud():
    r = client.post("/records", json={"title": "t", "new_category": "Ideas"})
    assert r.status_code == 201
    rec = r.json()
    assert rec["category"] == "Ideas"

    r = client.get(f"/records/{rec['id']}")
    assert r.status_code == 200
    assert r.json()["title"] == "t"

    r = client.put(f"/records/{rec['id']}", json={"title": "t2", "category": "Code"})
    assert r.status_code == 200
    assert r.json()["id"] == rec["id"]
    assert r.json()["category"] == "Code"

    assert "Ideas" in client.get("/categories").json()["categories"]

    r = client.delete(f"/records/{rec['id']}")
    assert r.status_code == 204
    assert client.get(f"/records/{rec['id']}").status_code == 404


def test_unknown_record_is_404():
    assert client.put("/records/missing", json={"title": "x"}).status_code == 404
    assert client.delete("/records/missing").status_code == 404


def test_list_records_filters():
    _upload(CSV.encode("utf-8"))

    titles = [rec["title"] for rec in client.get("/records").json()]
    assert titles == ["Email", "Story"]

    r = client.get("/records", params={"category": "Creative", "sort": "oldest"})
    assert [rec["title"] for rec in r.json()] == ["Story"]

    r = client.get("/records", params={"q": "dragon"})
    assert [rec["title"] for rec in r.json()] == ["Story"]


def test_failed_save_is_503_and_rolled_back(tmp_path, monkeypatch):
    monkeypatch.setenv("PROMPTPAD_STORE_PATH", str(tmp_path / "missing" / "store.json"))
    reset_settings()
    reset_store()

    r = client.post("/records", json={"title": "x"})
    assert r.status_code == 503
    assert "cannot save store" in r.json()["detail"]

    assert client.get("/records").json() == []

    r = _upload(CSV.encode("utf-8"))
    assert r.status_code == 503
    assert client.get("/records").json() == []
    assert client.get("/categories").json()["categories"] == ["General", "Creative", "Code"]


def test_corrupt_store_file_is_503(store_path):
    store_path.write_text("{not json", encoding="utf-8")

    r = client.get("/records")
    assert r.status_code == 503
    assert "cannot load store" in r.json()["detail"]
    assert client.post("/records", json={"title": "x"}).status_code == 503
