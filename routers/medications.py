import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import storage
from auth import get_current_user
from database import get_db
from models import Medication, User
from schemas import MedicationCreate, MedicationUpdate, iso

router = APIRouter(prefix="/api/medications", tags=["medications"])


def _medication_response(m):
    return {"id": str(m.id), "name": m.name, "dosage": m.dosage, "frequency": m.frequency,
            "started_at": iso(m.started_at), "stopped_at": iso(m.stopped_at), "notes": m.notes,
            "photo_key": m.photo_key, "photo_url": storage.presign_download(m.photo_key) if m.photo_key else None,
            "active": m.stopped_at is None, "created_at": iso(m.created_at), "updated_at": iso(m.updated_at)}


def _check_photo_key(key: str | None, user: User):
    if key and not storage.is_user_upload(user.id, key):
        raise HTTPException(status_code=400, detail="Invalid photo key")


def _get_owned(db: Session, med_id: uuid.UUID, user: User) -> Medication:
    med = db.query(Medication).filter(Medication.id == med_id, Medication.user_id == user.id).first()
    if not med:
        raise HTTPException(status_code=404, detail="Medication not found")
    return med


@router.post("")
@router.post("/", include_in_schema=False)
def create_medication(body: MedicationCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _check_photo_key(body.photo_key, user)
    med = Medication(
        id=uuid.uuid4(), user_id=user.id, name=body.name,
        dosage=body.dosage or None, frequency=body.frequency or None,
        started_at=body.started_at, stopped_at=body.stopped_at,
        notes=body.notes or None, photo_key=body.photo_key or None,
    )
    db.add(med); db.commit(); db.refresh(med)
    return {"medication": _medication_response(med)}


@router.get("")
@router.get("/", include_in_schema=False)
def list_medications(active: bool = False, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    q = db.query(Medication).filter(Medication.user_id == user.id)
    if active:
        q = q.filter(Medication.stopped_at.is_(None))
    meds = q.order_by(Medication.started_at.desc().nullslast()).all()
    return {"medications": [_medication_response(m) for m in meds]}


@router.get("/{med_id}")
def get_medication(med_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"medication": _medication_response(_get_owned(db, med_id, user))}


@router.patch("/{med_id}")
def update_medication(med_id: uuid.UUID, body: MedicationUpdate,
                      user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    med = _get_owned(db, med_id, user)
    sent = body.model_fields_set
    _check_photo_key(body.photo_key, user)
    if body.name: med.name = body.name
    if "dosage" in sent: med.dosage = body.dosage or None
    if "frequency" in sent: med.frequency = body.frequency or None
    if body.started_at: med.started_at = body.started_at
    if "stopped_at" in sent: med.stopped_at = body.stopped_at
    if "notes" in sent: med.notes = body.notes or None
    if "photo_key" in sent:
        if med.photo_key and med.photo_key != body.photo_key:
            storage.delete_quietly(med.photo_key)
        med.photo_key = body.photo_key or None
    db.commit(); db.refresh(med)
    return {"medication": _medication_response(med)}


@router.delete("/{med_id}")
def delete_medication(med_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    med = _get_owned(db, med_id, user)
    storage.delete_quietly(med.photo_key)
    db.delete(med); db.commit()
    return {"success": True}
