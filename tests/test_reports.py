from datetime import datetime, timedelta

from models import Report, utcnow
from report_builder import render_pdf, summarize_vitals


def _window(days_back=7, days_ahead=1):
    now = utcnow()
    return {"start_date": (now - timedelta(days=days_back)).isoformat() + "Z",
            "end_date": (now + timedelta(days=days_ahead)).isoformat() + "Z"}


def test_summarize_vitals():
    vitals = [
        {"bp": "130/85", "hr": 80, "tempC": 37.4},
        {"hr": 70, "spo2": 97},
        {"bp": "120/80", "hr": 75, "tempC": 37.0, "spo2": 99},
        {"hr": "fast", "spo2": True},
    ]
    summary = summarize_vitals(vitals)
    assert summary["blood_pressure"] == {"latest": "130/85", "average": None}
    assert summary["heart_rate"] == {"latest": 80, "average": 75}
    assert summary["temperature"] == {"latest": 37.4, "average": 37.2}
    assert summary["spo2"] == {"latest": 97, "average": 98}


def test_summarize_vitals_empty():
    summary = summarize_vitals([])
    assert all(v == {"latest": None, "average": None} for v in summary.values())


def test_render_pdf_handles_markup_in_user_text():
    now = datetime(2026, 10, 1)
    data = {
        "user": {"display_name": "A & B <test>", "email": "a@example.com"},
        "date_range": {"start": now - timedelta(days=30), "end": now},
        "conditions": [{"name": "Asthma <mild>", "body_region": "LUNGS", "onset_date": None}],
        "symptoms": [{"title": "Cough & wheeze", "body_region": "LUNGS", "severity": 4, "date": now}],
        "vitals": summarize_vitals([{"bp": "120/80", "hr": 72}]),
        "activities": [{"type": "running", "date": now, "distance_km": 5, "duration_min": 30}],
        "medications": [{"name": "Salbutamol", "dosage": "100mcg", "frequency": None}],
        "journal_notes": [{"date": now, "text": "Felt <b>fine</b>"}],
    }
    pdf = render_pdf(data)
    assert pdf.startswith(b"%PDF")
    assert render_pdf(data, heatmap_png=b"%PDF-1.4 not a png").startswith(b"%PDF")


def test_generate_report_uploads_pdf(user_client, fake_s3, db):
    user_client.post("/api/conditions", json={"name": "Migraine", "body_region": "HEAD"})
    user_client.post("/api/symptoms", json={"body_region": "HEAD", "title": "Headache", "severity": 5})
    user_client.post("/api/medications", json={"name": "Sumatriptan", "dosage": "50mg"})

    r = user_client.post("/api/reports/generate", json=_window())
    assert r.status_code == 200
    report = r.json()["report"]
    assert "op=get_object" in report["download_url"]

    stored = db.query(Report).one()
    assert stored.pdf_key.startswith(f"reports/{user_client.user['id']}/")
    body, content_type = fake_s3.objects[stored.pdf_key]
    assert content_type == "application/pdf"
    assert body.startswith(b"%PDF")


def test_generate_report_without_heatmap_image(user_client, fake_s3):
    key = f"uploads/{user_client.user['id']}/missing.png"
    r = user_client.post("/api/reports/generate", json={**_window(), "heatmap_image_key": key})
    assert r.status_code == 200
    assert len(fake_s3.objects) == 1


def test_generate_report_skips_undecodable_heatmap(user_client, fake_s3):
    key = f"uploads/{user_client.user['id']}/1.png"
    fake_s3.objects[key] = (b"not an image", "image/png")

    r = user_client.post("/api/reports/generate", json={**_window(), "heatmap_image_key": key})
    assert r.status_code == 200
    pdf_key = next(k for k in fake_s3.objects if k.startswith("reports/"))
    assert fake_s3.objects[pdf_key][0].startswith(b"%PDF")


def test_generate_report_rejects_foreign_heatmap_key(user_client, other_client, fake_s3):
    key = f"uploads/{user_client.user['id']}/1.png"
    fake_s3.objects[key] = (b"\x89PNG", "image/png")

    r = other_client.post("/api/reports/generate", json={**_window(), "heatmap_image_key": key})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid heatmap image key"
    assert other_client.get("/api/reports").json()["reports"] == []


def test_generate_report_rejects_inverted_range(user_client):
    window = _window()
    r = user_client.post("/api/reports/generate",
                         json={"start_date": window["end_date"], "end_date": window["start_date"]})
    assert r.status_code == 400


def test_list_and_delete_reports(user_client, other_client, fake_s3):
    user_client.post("/api/reports/generate", json=_window())
    user_client.post("/api/reports/generate", json=_window(days_back=30))

    reports = user_client.get("/api/reports").json()["reports"]
    assert len(reports) == 2
    assert other_client.get("/api/reports").json()["reports"] == []
    assert other_client.delete(f"/api/reports/{reports[0]['id']}").status_code == 404

    assert user_client.delete(f"/api/reports/{reports[0]['id']}").json() == {"success": True}
    assert len(fake_s3.deleted) == 1
    assert len(user_client.get("/api/reports").json()["reports"]) == 1
