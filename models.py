from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, JSON, Index, Uuid
from sqlalchemy.orm import declarative_base, relationship
import uuid
from datetime import datetime, timezone
from database import engine

Base = declarative_base()


def utcnow() -> datetime:
    # Naive UTC, matching what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ─── Enumerations ───
BODY_REGIONS = (
    "HEAD", "NECK", "CHEST", "HEART", "LUNGS", "ABDOMEN",
    "LOW_BACK", "UPPER_BACK", "LEFT_ARM", "RIGHT_ARM",
    "LEFT_LEG", "RIGHT_LEG", "SKIN", "MENTAL_HEALTH", "OTHER",
)

REGION_DISPLAY_NAMES = {
    "HEAD": "Head",
    "NECK": "Neck",
    "CHEST": "Chest",
    "HEART": "Heart",
    "LUNGS": "Lungs",
    "ABDOMEN": "Abdomen",
    "LOW_BACK": "Lower Back",
    "UPPER_BACK": "Upper Back",
    "LEFT_ARM": "Left Arm",
    "RIGHT_ARM": "Right Arm",
    "LEFT_LEG": "Left Leg",
    "RIGHT_LEG": "Right Leg",
    "SKIN": "Skin",
    "MENTAL_HEALTH": "Mental Health",
    "OTHER": "Other",
}

CONDITION_STATUSES = ("ACTIVE", "RESOLVED")
SYMPTOM_CATEGORIES = ("SYMPTOM", "VITAL", "ACTIVITY", "NOTE")
PARSE_STATUSES = ("PENDING", "PARSED", "ERROR")


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    conditions = relationship("Condition", back_populates="user", cascade="all, delete-orphan")
    symptom_entries = relationship("SymptomEntry", back_populates="user", cascade="all, delete-orphan")
    journal_entries = relationship("JournalEntry", back_populates="user", cascade="all, delete-orphan")
    medications = relationship("Medication", back_populates="user", cascade="all, delete-orphan")
    reports = relationship("Report", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")


class Condition(Base):
    __tablename__ = "conditions"
    __table_args__ = (Index("ix_conditions_user_status", "user_id", "status"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    body_region = Column(String, nullable=False)
    onset_date = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="ACTIVE")  # "ACTIVE" or "RESOLVED"
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="conditions")


class JournalEntry(Base):
    __tablename__ = "journal_entries"
    __table_args__ = (
        Index("ix_journal_entries_user_status", "user_id", "parse_status"),
        Index("ix_journal_entries_user_created", "user_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    raw_text = Column(Text, nullable=False)
    parse_status = Column(String, nullable=False, default="PENDING")  # "PENDING", "PARSED", "ERROR"
    parsed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="journal_entries")
    symptom_entries = relationship("SymptomEntry", back_populates="journal_entry",
                                   order_by="SymptomEntry.created_at.desc()")


class SymptomEntry(Base):
    __tablename__ = "symptom_entries"
    __table_args__ = (
        Index("ix_symptom_entries_user_created", "user_id", "created_at"),
        Index("ix_symptom_entries_user_region", "user_id", "body_region"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    journal_entry_id = Column(Uuid, ForeignKey("journal_entries.id", ondelete="SET NULL"), nullable=True, index=True)
    body_region = Column(String, nullable=False)
    title = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    severity = Column(Integer, nullable=True)  # 1-10
    started_at = Column(DateTime, nullable=True)
    ended_at = Column(DateTime, nullable=True)
    tags = Column(JSON, nullable=True)  # ["migraine", "aura"]
    category = Column(String, nullable=False, default="SYMPTOM")
    vitals_json = Column(JSON, nullable=True)  # {"bp": "120/80", "hr": 72, "tempC": 37.2, "spo2": 98}
    activity_json = Column(JSON, nullable=True)  # {"type": "running", "distanceKm": 5, "durationMin": 30}
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="symptom_entries")
    journal_entry = relationship("JournalEntry", back_populates="symptom_entries")


class Medication(Base):
    __tablename__ = "medications"
    __table_args__ = (Index("ix_medications_user_started", "user_id", "started_at"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    dosage = Column(String, nullable=True)
    frequency = Column(String, nullable=True)  # "Twice daily", "As needed"
    started_at = Column(DateTime, nullable=True)
    stopped_at = Column(DateTime, nullable=True)
    photo_key = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="medications")


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (Index("ix_reports_user_created", "user_id", "created_at"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    from_date = Column(DateTime, nullable=False)
    to_date = Column(DateTime, nullable=False)
    pdf_key = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="reports")


Base.metadata.create_all(bind=engine, checkfirst=True)
