import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from extraction import parse_in_background
from models import JournalEntry, SymptomEntry, User
from schemas import JournalCreate, JournalUpdate, journal_response

router = APIRouter(prefix="/api/journal", tags=["journal"])


def _get_owned(db: Session, entry_id: uuid.UUID, user: User) -> JournalEntry:
    entry = db.query(JournalEntry).filter(JournalEntry.id == entry_id, JournalEntry.user_id == user.id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found")
    return entry


@router.post("")
@router.post("/", include_in_schema=False)
def create_entry(body: JournalCreate, background_tasks: BackgroundTasks,
                 user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry = JournalEntry(id=uuid.uuid4(), user_id=user.id, raw_text=body.raw_text, parse_status="PENDING")
    db.add(entry); db.commit(); db.refresh(entry)
    # Extraction runs after the response is sent
    background_tasks.add_task(parse_in_background, entry.id)
    return {"entry": journal_response(entry)}


@router.get("")
@router.get("/", include_in_schema=False)
def list_entries(limit: int = Query(20, ge=1, le=200), offset: int = Query(0, ge=0),
                 user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entries = (
        db.query(JournalEntry)
        .filter(JournalEntry.user_id == user.id)
        .order_by(JournalEntry.created_at.desc())
        .limit(limit).offset(offset)
        .all()
    )
    total = db.query(func.count(JournalEntry.id)).filter(JournalEntry.user_id == user.id).scalar() or 0
    return {"entries": [journal_response(e) for e in entries], "total": total}


@router.get("/{entry_id}")
def get_entry(entry_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"entry": journal_response(_get_owned(db, entry_id, user))}


@router.patch("/{entry_id}")
def update_entry(entry_id: uuid.UUID, body: JournalUpdate, background_tasks: BackgroundTasks,
                 user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry = _get_owned(db, entry_id, user)
    if body.raw_text and body.raw_text != entry.raw_text:
        # New text invalidates whatever was extracted from the old one
        db.query(SymptomEntry).filter(SymptomEntry.journal_entry_id == entry.id).delete(synchronize_session=False)
        entry.raw_text = body.raw_text
        entry.parse_status = "PENDING"
        entry.parsed_at = None
        background_tasks.add_task(parse_in_background, entry.id)
    db.commit()
    db.expire(entry)
    return {"entry": journal_response(entry)}


@router.delete("/{entry_id}")
def delete_entry(entry_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry = _get_owned(db, entry_id, user)
    db.delete(entry); db.commit()
    return {"success": True}
