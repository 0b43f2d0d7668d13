import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models import SymptomEntry, User
from schemas import BodyRegion, SymptomCreate, SymptomUpdate, symptom_response

router = APIRouter(prefix="/api/symptoms", tags=["symptoms"])


def _get_owned(db: Session, symptom_id: uuid.UUID, user: User) -> SymptomEntry:
    symptom = db.query(SymptomEntry).filter(SymptomEntry.id == symptom_id, SymptomEntry.user_id == user.id).first()
    if not symptom:
        raise HTTPException(status_code=404, detail="Symptom not found")
    return symptom


@router.post("")
@router.post("/", include_in_schema=False)
def create_symptom(body: SymptomCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    symptom = SymptomEntry(
        id=uuid.uuid4(), user_id=user.id, body_region=body.body_region, title=body.title,
        notes=body.notes or None, severity=body.severity,
        started_at=body.started_at, ended_at=body.ended_at,
        tags=body.tags or [], category="SYMPTOM",
    )
    db.add(symptom); db.commit(); db.refresh(symptom)
    return {"symptom": symptom_response(symptom)}


@router.get("")
@router.get("/", include_in_schema=False)
def list_symptoms(region: BodyRegion | None = None, limit: int = Query(100, ge=1, le=1000),
                  user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    q = db.query(SymptomEntry).filter(SymptomEntry.user_id == user.id)
    if region:
        q = q.filter(SymptomEntry.body_region == region)
    symptoms = q.order_by(SymptomEntry.created_at.desc()).limit(limit).all()
    return {"symptoms": [symptom_response(s) for s in symptoms]}


@router.get("/{symptom_id}")
def get_symptom(symptom_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"symptom": symptom_response(_get_owned(db, symptom_id, user))}


@router.patch("/{symptom_id}")
def update_symptom(symptom_id: uuid.UUID, body: SymptomUpdate,
                   user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    symptom = _get_owned(db, symptom_id, user)
    changes = body.model_dump(exclude_unset=True)
    # Required columns ignore explicit nulls
    for field in ("body_region", "title"):
        if changes.get(field) is None:
            changes.pop(field, None)
    if "notes" in changes:
        changes["notes"] = changes["notes"] or None
    if "tags" in changes:
        changes["tags"] = changes["tags"] or []
    for field, value in changes.items():
        setattr(symptom, field, value)
    db.commit(); db.refresh(symptom)
    return {"symptom": symptom_response(symptom)}


@router.delete("/{symptom_id}")
def delete_symptom(symptom_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    symptom = _get_owned(db, symptom_id, user)
    db.delete(symptom); db.commit()
    return {"success": True}
