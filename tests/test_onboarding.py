import demo_data
from models import Condition, JournalEntry, Medication, Report, SymptomEntry


def test_new_user_needs_onboarding(user_client):
    assert user_client.get("/api/onboarding/status").json() == {"needs_onboarding": True}


def test_skip_adds_placeholder_condition(user_client):
    assert user_client.post("/api/onboarding/skip").json() == {"success": True}
    assert user_client.get("/api/onboarding/status").json() == {"needs_onboarding": False}

    conditions = user_client.get("/api/conditions").json()["conditions"]
    assert [(c["name"], c["body_region"]) for c in conditions] == [("General Health Tracking", "OTHER")]


def test_complete_with_own_data(user_client, db):
    r = user_client.post("/api/onboarding/complete", json={
        "import_demo": False,
        "conditions": [{"name": "Asthma", "body_region": "LUNGS"}],
        "medications": [{"name": "Salbutamol", "dosage": "100mcg"}, {"name": "   "}],
        "medical_history": "Childhood asthma, appendix removed in 2010.",
    })
    assert r.json() == {"success": True}

    assert [c.name for c in db.query(Condition).all()] == ["Asthma"]
    assert [m.name for m in db.query(Medication).all()] == ["Salbutamol"]
    history = db.query(JournalEntry).one()
    assert history.parse_status == "PENDING"
    assert history.raw_text.startswith("Childhood asthma")
    assert user_client.get("/api/onboarding/status").json() == {"needs_onboarding": False}


def test_complete_with_blank_history_adds_no_entry(user_client, db):
    user_client.post("/api/onboarding/complete", json={
        "import_demo": False, "medications": [{"name": "Vitamin D"}], "medical_history": "  ",
    })
    assert db.query(JournalEntry).count() == 0


def test_complete_with_demo_data(user_client, db):
    r = user_client.post("/api/onboarding/complete", json={"import_demo": True})
    assert r.json() == {"success": True}

    assert db.query(Condition).count() == len(demo_data.DEMO_CONDITIONS)
    assert db.query(Medication).count() == len(demo_data.DEMO_MEDICATIONS)
    assert db.query(JournalEntry).filter(JournalEntry.parse_status == "PARSED").count() == len(demo_data.DEMO_JOURNAL)
    assert db.query(SymptomEntry).filter(SymptomEntry.category == "VITAL").count() == len(demo_data.DEMO_VITALS)
    assert db.query(SymptomEntry).filter(SymptomEntry.category == "ACTIVITY").count() == len(demo_data.DEMO_ACTIVITIES)
    assert db.query(Report).one().pdf_key == demo_data.DEMO_REPORT_KEY

    regions = {r["region"]: r["count"] for r in user_client.get("/api/regions/summary").json()["regions"]}
    assert regions["HEART"] == 1
    assert regions["HEAD"] == 1


def test_onboarding_requires_login(client):
    assert client.get("/api/onboarding/status").status_code == 401
