import base64

from fastapi.testclient import TestClient
from esker_csv.main import app

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_convert_rewrites_configured_columns():
    raw = (
        "a,b,c,d,e,f,g,h,i,j,k,l,m\n"
        '1,2,"25/12/2023 09:00:00",26/12/2023,x,y,z,h,i,j,27/12/2023,k,28/12/2023\n'
    ).encode("utf-8")

    files = {"file": ("export_PC1.csv", raw, "text/csv")}
    r = client.post("/convert", files=files, params={"out_date": "2024-01-01"})
    assert r.status_code == 200

    data = r.json()
    assert data["site"] == "PC1"
    assert data["lines"] == {"total": 2, "changed": 1, "unchanged": 1}
    assert data["converted_csv"]["filename"] == "synthomer_PC1_ESKER_2024-01-01.csv"

    out_text = base64.b64decode(data["converted_csv"]["content_b64"]).decode("utf-8")
    assert out_text.splitlines() == [
        "a,b,c,d,e,f,g,h,i,j,k,l,m",
        '1,2,"2023-12-25",2023-12-26,x,y,z,h,i,j,2023-12-27,k,2023-12-28',
    ]

def test_convert_handles_latin1_upload():
    raw = "site,name,when,d\nP11,Montréal,01/02/2024 10:00:00,03/02/2024\n".encode("latin-1")

    files = {"file": ("export.csv", raw, "text/csv")}
    r = client.post("/convert", files=files, params={"out_date": "2024-02-05"})
    assert r.status_code == 200

    data = r.json()
    assert data["site"] == "P11"
    out_text = base64.b64decode(data["converted_csv"]["content_b64"]).decode("utf-8")
    assert "Montréal,2024-02-01,2024-02-03" in out_text

def test_convert_rejects_non_csv():
    files = {"file": ("export.txt", b"a,b\n", "text/plain")}
    r = client.post("/convert", files=files)
    assert r.status_code == 422

def test_convert_rejects_bad_out_date():
    files = {"file": ("export.csv", b"a,b\n", "text/csv")}
    r = client.post("/convert", files=files, params={"out_date": "01/01/2024"})
    assert r.status_code == 422
