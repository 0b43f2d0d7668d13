import json
import logging
import time

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from auth import clear_session_cookie, get_current_user, hash_password, open_session, read_session_token, verify_password
from database import get_db
import storage
from models import User, UserSession, utcnow
from schemas import (ChangePasswordRequest, LoginRequest, ProfileUpdate, RegisterRequest, condition_response,
                     iso, journal_response, symptom_response, user_response)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register")
def register(body: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    email = body.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(email=email, password_hash=hash_password(body.password), display_name=body.display_name or None)
    db.add(user); db.commit(); db.refresh(user)
    open_session(db, user, response)
    logger.info("Registered user %s", user.id)
    return {"user": user_response(user)}


@router.post("/login")
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email.lower()).first()
    if not user or not user.password_hash or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    open_session(db, user, response)
    return {"user": user_response(user)}


@router.post("/logout")
def logout(response: Response, session_id: str | None = Cookie(default=None), db: Session = Depends(get_db)):
    sid = read_session_token(session_id) if session_id else None
    if sid:
        db.query(UserSession).filter(UserSession.id == sid).delete(); db.commit()
    clear_session_cookie(response)
    return {"success": True}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"user": user_response(user)}


@router.patch("/profile")
def update_profile(body: ProfileUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if "display_name" in body.model_fields_set:
        user.display_name = body.display_name or None
    db.commit(); db.refresh(user)
    return {"user": user_response(user)}


@router.post("/change-password")
def change_password(body: ChangePasswordRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not user.password_hash or not verify_password(body.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    user.password_hash = hash_password(body.new_password)
    db.commit()
    return {"success": True}


@router.get("/export")
def export_data(user: User = Depends(get_current_user)):
    data = {
        "exported_at": iso(utcnow()),
        "user": user_response(user),
        "conditions": [condition_response(c) for c in user.conditions],
        "medications": [{"id": str(m.id), "name": m.name, "dosage": m.dosage, "frequency": m.frequency,
                         "started_at": iso(m.started_at), "stopped_at": iso(m.stopped_at),
                         "photo_key": m.photo_key, "notes": m.notes} for m in user.medications],
        "journal_entries": [journal_response(j, with_symptoms=False) for j in user.journal_entries],
        "symptom_entries": [symptom_response(s) for s in user.symptom_entries],
    }
    filename = f"health-data-export-{int(time.time() * 1000)}.json"
    return Response(
        content=json.dumps(data),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/account")
def delete_account(response: Response, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user_id = user.id
    keys = [m.photo_key for m in user.medications] + [r.pdf_key for r in user.reports]
    db.delete(user); db.commit()
    for key in keys:
        storage.delete_quietly(key)
    clear_session_cookie(response)
    logger.info("Deleted account %s", user_id)
    return {"success": True}
