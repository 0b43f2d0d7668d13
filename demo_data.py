"""Sample records seeded by onboarding when the user asks for demo data."""
from datetime import datetime

DEMO_CONDITIONS = [
    {
        "name": "Atrial Fibrillation",
        "description": "Irregular and often rapid heart rhythm that can increase risk of stroke and heart failure.",
        "body_region": "HEART",
        "onset_date": datetime(2022, 3, 15),
    },
    {
        "name": "Chronic Migraine",
        "description": "Recurring severe headaches with sensitivity to light and sound.",
        "body_region": "HEAD",
        "onset_date": datetime(2018, 6, 1),
    },
]

DEMO_SYMPTOMS = [
    {
        "body_region": "HEART",
        "title": "Heart palpitations during exercise",
        "notes": "Noticed irregular heartbeat while on treadmill, lasted about 15 minutes.",
        "severity": 6,
        "started_at": datetime(2025, 9, 28, 14, 30),
        "ended_at": datetime(2025, 9, 28, 14, 45),
        "tags": ["exercise", "palpitations", "cardio"],
    },
    {
        "body_region": "HEAD",
        "title": "Severe migraine with aura",
        "notes": "Started with visual aura (zigzag lines), followed by throbbing pain on left side. "
                 "Took medication and rested in dark room.",
        "severity": 9,
        "started_at": datetime(2025, 9, 27, 9, 0),
        "ended_at": datetime(2025, 9, 27, 15, 30),
        "tags": ["migraine", "aura", "severe", "photophobia"],
    },
]

DEMO_MEDICATIONS = [
    {
        "name": "Apixaban (Eliquis)",
        "dosage": "5mg",
        "frequency": "Twice daily",
        "started_at": datetime(2022, 3, 20),
        "notes": "Blood thinner for AFib. Take with food.",
    },
    {
        "name": "Sumatriptan",
        "dosage": "100mg",
        "frequency": "As needed",
        "started_at": datetime(2020, 1, 10),
        "notes": "For acute migraine attacks. Maximum 2 doses per 24 hours.",
    },
]

DEMO_JOURNAL = [
    "My blood pressure was 128/82 this morning. Heart rate was 72 bpm. Feeling good overall.",
    "Went for a 30-minute walk today, about 2 miles. No chest discomfort or palpitations.",
    "Mild headache this afternoon, severity about 4/10. Took ibuprofen and it helped.",
    "BP reading: 130/84, HR: 76. Took my AFib medication as prescribed.",
    "Running 3 miles this morning. Felt great! No irregular heartbeat. Duration: 28 minutes.",
    "General check-in: Medications taken on time. No symptoms today. Sleep was good (7 hours).",
]

DEMO_VITALS = [
    {"vitals_json": {"bp": "128/82", "hr": 72}, "started_at": datetime(2025, 9, 28, 8, 0)},
    {"vitals_json": {"bp": "130/84", "hr": 76}, "started_at": datetime(2025, 9, 27, 8, 0)},
    {"vitals_json": {"bp": "125/80", "hr": 70}, "started_at": datetime(2025, 9, 26, 8, 0)},
]

DEMO_ACTIVITIES = [
    {
        "title": "Morning Walk",
        "activity_json": {"type": "Walking", "distanceKm": 3.2, "durationMin": 30},
        "started_at": datetime(2025, 9, 28, 7, 0),
    },
    {
        "title": "Running",
        "activity_json": {"type": "Running", "distanceKm": 4.8, "durationMin": 28, "perceivedExertion": 7},
        "started_at": datetime(2025, 9, 26, 7, 0),
    },
]

# Placeholder key; replaced the first time the user generates a real report
DEMO_REPORT_KEY = "demo/sample-report.pdf"
