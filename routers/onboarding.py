import logging
import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

import demo_data
import storage
from auth import get_current_user
from database import get_db
from models import Condition, JournalEntry, Medication, Report, SymptomEntry, User, utcnow
from schemas import OnboardingComplete

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])


@router.get("/status")
def status(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    conditions = db.query(func.count(Condition.id)).filter(Condition.user_id == user.id).scalar()
    medications = db.query(func.count(Medication.id)).filter(Medication.user_id == user.id).scalar()
    return {"needs_onboarding": not conditions and not medications}


@router.post("/skip")
def skip(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    # A placeholder condition marks onboarding as done
    db.add(Condition(id=uuid.uuid4(), user_id=user.id, name="General Health Tracking",
                     description="Initial profile created", body_region="OTHER", status="ACTIVE"))
    db.commit()
    return {"success": True}


def _import_demo(db: Session, user: User):
    now = utcnow()
    for c in demo_data.DEMO_CONDITIONS:
        db.add(Condition(id=uuid.uuid4(), user_id=user.id, status="ACTIVE", **c))
    for s in demo_data.DEMO_SYMPTOMS:
        db.add(SymptomEntry(id=uuid.uuid4(), user_id=user.id, category="SYMPTOM", **s))
    for m in demo_data.DEMO_MEDICATIONS:
        db.add(Medication(id=uuid.uuid4(), user_id=user.id, **m))
    for text in demo_data.DEMO_JOURNAL:
        db.add(JournalEntry(id=uuid.uuid4(), user_id=user.id, raw_text=text, parse_status="PARSED", parsed_at=now))
    for v in demo_data.DEMO_VITALS:
        db.add(SymptomEntry(id=uuid.uuid4(), user_id=user.id, body_region="OTHER", title="Blood Pressure Reading",
                            category="VITAL", **v))
    for a in demo_data.DEMO_ACTIVITIES:
        db.add(SymptomEntry(id=uuid.uuid4(), user_id=user.id, body_region="OTHER", category="ACTIVITY", **a))
    db.add(Report(id=uuid.uuid4(), user_id=user.id, from_date=now - timedelta(days=30), to_date=now,
                  pdf_key=demo_data.DEMO_REPORT_KEY))
    logger.info("Demo data imported for user %s", user.id)


@router.post("/complete")
def complete(body: OnboardingComplete, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if body.import_demo:
        _import_demo(db, user)
    else:
        for c in body.conditions:
            db.add(Condition(id=uuid.uuid4(), user_id=user.id, name=c.name, body_region=c.body_region,
                             onset_date=c.onset_date, status="ACTIVE"))
        for m in body.medications:
            if not m.name.strip():
                continue
            if m.photo_key and not storage.is_user_upload(user.id, m.photo_key):
                raise HTTPException(status_code=400, detail="Invalid photo key")
            db.add(Medication(id=uuid.uuid4(), user_id=user.id, name=m.name, dosage=m.dosage or None,
                              frequency=m.frequency or None, started_at=m.started_at, stopped_at=m.stopped_at,
                              photo_key=m.photo_key or None))

    if body.medical_history.strip():
        db.add(JournalEntry(id=uuid.uuid4(), user_id=user.id, raw_text=body.medical_history, parse_status="PENDING"))

    db.commit()
    return {"success": True}
