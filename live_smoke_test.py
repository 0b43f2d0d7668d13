#!/usr/bin/env python3
"""
Live smoke test for a deployed Health Heatmap API.

Usage:
  python3 live_smoke_test.py
  BASE_URL=http://... python3 live_smoke_test.py
"""

import os
import time
from datetime import date, timedelta

import requests

BASE = os.getenv("BASE_URL", "http://localhost:4000")
FRONT_ORIGIN = os.getenv("FRONT_ORIGIN", "http://localhost:5173")


def ok(name: str, cond: bool, detail: str = "") -> bool:
    status = "PASS" if cond else "FAIL"
    print(f"{status} - {name} {detail}".rstrip())
    return cond


def main() -> int:
    all_ok = True
    s = requests.Session()
    stamp = str(int(time.time()))
    email = f"smoke_{stamp}@example.com"
    password = "Test@123456"

    # 1) health
    r = s.get(BASE + "/health", timeout=25)
    all_ok &= ok("Health", r.status_code == 200, f"status={r.status_code}")
    if r.status_code != 200:
        return 2

    # 2) register (sets the session cookie on the Session)
    r = s.post(BASE + "/api/auth/register", timeout=25,
               json={"email": email, "password": password, "display_name": "Smoke User"})
    all_ok &= ok("Register", r.status_code == 200, f"status={r.status_code}")
    if r.status_code != 200:
        print(r.text)
        return 2
    all_ok &= ok("Session cookie set", "session_id" in s.cookies)

    # 3) me
    r = s.get(BASE + "/api/auth/me", timeout=25)
    all_ok &= ok("Me", r.status_code == 200 and r.json()["user"]["email"] == email, f"status={r.status_code}")

    # 4) condition + symptom
    r = s.post(BASE + "/api/conditions", timeout=25, json={"name": "Migraine", "body_region": "HEAD"})
    all_ok &= ok("Create condition", r.status_code == 200, f"status={r.status_code}")
    r = s.post(BASE + "/api/symptoms", timeout=25, json={"body_region": "HEAD", "title": "Headache", "severity": 5})
    all_ok &= ok("Create symptom", r.status_code == 200, f"status={r.status_code}")

    # 5) heatmap summary
    r = s.get(BASE + "/api/regions/summary", timeout=25)
    if r.status_code == 200:
        head = next(x for x in r.json()["regions"] if x["region"] == "HEAD")
        all_ok &= ok("Region summary counts HEAD", head["count"] == 1, f"count={head['count']}")
    else:
        all_ok &= ok("Region summary", False, f"status={r.status_code}")

    # 6) journal entry (extraction runs server-side in the background)
    r = s.post(BASE + "/api/journal", timeout=25, json={"raw_text": "Heart rate 72 bpm, mild headache 3/10."})
    all_ok &= ok("Create journal entry", r.status_code == 200, f"status={r.status_code}")

    # 7) report
    today = date.today()
    r = s.post(BASE + "/api/reports/generate", timeout=60,
               json={"start_date": str(today - timedelta(days=30)), "end_date": str(today + timedelta(days=1))})
    all_ok &= ok("Generate report", r.status_code == 200, f"status={r.status_code}")
    if r.status_code == 200:
        all_ok &= ok("Download URL present", bool(r.json()["report"].get("download_url")))

    # 8) CORS preflight for a credentialed route
    r = requests.options(
        BASE + "/api/symptoms",
        timeout=25,
        headers={
            "Origin": FRONT_ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    all_ok &= ok("CORS preflight symptoms", r.status_code == 200, f"status={r.status_code}")

    # 9) cleanup
    r = s.delete(BASE + "/api/auth/account", timeout=25)
    all_ok &= ok("Delete account", r.status_code == 200, f"status={r.status_code}")

    print("\nOVERALL", "PASS" if all_ok else "FAIL")
    return 0 if all_ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
