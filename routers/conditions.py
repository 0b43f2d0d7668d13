import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models import Condition, User
from schemas import BodyRegion, ConditionCreate, ConditionStatus, ConditionUpdate, condition_response

router = APIRouter(prefix="/api/conditions", tags=["conditions"])


def _get_owned(db: Session, condition_id: uuid.UUID, user: User) -> Condition:
    condition = db.query(Condition).filter(Condition.id == condition_id, Condition.user_id == user.id).first()
    if not condition:
        raise HTTPException(status_code=404, detail="Condition not found")
    return condition


@router.post("")
@router.post("/", include_in_schema=False)
def create_condition(body: ConditionCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    condition = Condition(
        id=uuid.uuid4(), user_id=user.id, name=body.name, description=body.description or None,
        body_region=body.body_region, onset_date=body.onset_date, status=body.status or "ACTIVE",
    )
    db.add(condition); db.commit(); db.refresh(condition)
    return {"condition": condition_response(condition)}


@router.get("")
@router.get("/", include_in_schema=False)
def list_conditions(region: BodyRegion | None = None, status: ConditionStatus | None = None,
                    user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    q = db.query(Condition).filter(Condition.user_id == user.id)
    if region:
        q = q.filter(Condition.body_region == region)
    if status:
        q = q.filter(Condition.status == status)
    return {"conditions": [condition_response(c) for c in q.order_by(Condition.created_at.desc()).all()]}


@router.get("/{condition_id}")
def get_condition(condition_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"condition": condition_response(_get_owned(db, condition_id, user))}


@router.patch("/{condition_id}")
def update_condition(condition_id: uuid.UUID, body: ConditionUpdate,
                     user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    condition = _get_owned(db, condition_id, user)
    if body.name: condition.name = body.name
    if "description" in body.model_fields_set: condition.description = body.description or None
    if body.body_region: condition.body_region = body.body_region
    if body.onset_date: condition.onset_date = body.onset_date
    if body.status: condition.status = body.status
    db.commit(); db.refresh(condition)
    return {"condition": condition_response(condition)}


@router.delete("/{condition_id}")
def delete_condition(condition_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    condition = _get_owned(db, condition_id, user)
    db.delete(condition); db.commit()
    return {"success": True}
