from datetime import timedelta
import uuid

from jose import JWTError, jwt
import bcrypt
from fastapi import Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from config import IS_PRODUCTION, SESSION_COOKIE, SESSION_MAX_AGE, SESSION_SECRET
from database import get_db

ALGORITHM = "HS256"

# ─── Password Hashing (using bcrypt directly) ───
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))

# ─── Session Cookie ───
# The cookie carries a signed token naming the session row; the row is the source of truth.
def sign_session(session_id: uuid.UUID, expires_at) -> str:
    return jwt.encode({"sid": str(session_id), "exp": expires_at}, SESSION_SECRET, algorithm=ALGORITHM)

def read_session_token(token: str) -> uuid.UUID | None:
    try:
        payload = jwt.decode(token, SESSION_SECRET, algorithms=[ALGORITHM])
        return uuid.UUID(payload["sid"])
    except (JWTError, KeyError, ValueError):
        return None

def open_session(db: Session, user, response: Response):
    from models import UserSession, utcnow

    session = UserSession(id=uuid.uuid4(), user_id=user.id,
                          expires_at=utcnow() + timedelta(seconds=SESSION_MAX_AGE))
    db.add(session); db.commit(); db.refresh(session)
    response.set_cookie(
        SESSION_COOKIE,
        sign_session(session.id, session.expires_at),
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        path="/",
    )
    return session

def clear_session_cookie(response: Response):
    response.delete_cookie(SESSION_COOKIE, path="/")

# ─── Get Current User (dependency) ───
def get_current_user(session_id: str | None = Cookie(default=None), db: Session = Depends(get_db)):
    from models import UserSession, utcnow  # import here to avoid circular import

    if not session_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    sid = read_session_token(session_id)
    session = db.get(UserSession, sid) if sid else None
    if session is None or session.user is None or session.expires_at < utcnow():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")

    return session.user
