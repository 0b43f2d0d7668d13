from pydantic import AfterValidator, BaseModel, EmailStr, Field
from typing import Annotated, Any, Literal, Optional
from datetime import datetime, timezone
from uuid import UUID


def _naive_utc(value: datetime) -> datetime:
    # Columns hold naive UTC; offsets are folded in before storage
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

UtcDatetime = Annotated[datetime, AfterValidator(_naive_utc)]

BodyRegion = Literal[
    "HEAD", "NECK", "CHEST", "HEART", "LUNGS", "ABDOMEN",
    "LOW_BACK", "UPPER_BACK", "LEFT_ARM", "RIGHT_ARM",
    "LEFT_LEG", "RIGHT_LEG", "SKIN", "MENTAL_HEALTH", "OTHER",
]
ConditionStatus = Literal["ACTIVE", "RESOLVED"]

# ────── Auth ──────
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    display_name: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)

# ────── Symptoms ──────
class SymptomCreate(BaseModel):
    body_region: BodyRegion
    title: str = Field(min_length=1)
    notes: Optional[str] = None
    severity: Optional[int] = Field(default=None, ge=1, le=10)
    started_at: Optional[UtcDatetime] = None
    ended_at: Optional[UtcDatetime] = None
    tags: Optional[list[str]] = None

class SymptomUpdate(BaseModel):
    body_region: Optional[BodyRegion] = None
    title: Optional[str] = Field(default=None, min_length=1)
    notes: Optional[str] = None
    severity: Optional[int] = Field(default=None, ge=1, le=10)
    started_at: Optional[UtcDatetime] = None
    ended_at: Optional[UtcDatetime] = None
    tags: Optional[list[str]] = None

# ────── Conditions ──────
class ConditionCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    body_region: BodyRegion
    onset_date: Optional[UtcDatetime] = None
    status: Optional[ConditionStatus] = None

class ConditionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    body_region: Optional[BodyRegion] = None
    onset_date: Optional[UtcDatetime] = None
    status: Optional[ConditionStatus] = None

# ────── Journal ──────
class JournalCreate(BaseModel):
    raw_text: str = Field(min_length=1)

class JournalUpdate(BaseModel):
    raw_text: Optional[str] = Field(default=None, min_length=1)

# ────── AI ──────
class ParseRequest(BaseModel):
    journal_entry_id: UUID

class CustomReportRequest(BaseModel):
    text: str = Field(min_length=1)
    instruction: str = Field(min_length=1)

# ────── Medications ──────
class MedicationCreate(BaseModel):
    name: str = Field(min_length=1)
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    started_at: Optional[UtcDatetime] = None
    stopped_at: Optional[UtcDatetime] = None
    notes: Optional[str] = None
    photo_key: Optional[str] = None

class MedicationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    started_at: Optional[UtcDatetime] = None
    stopped_at: Optional[UtcDatetime] = None
    notes: Optional[str] = None
    photo_key: Optional[str] = None

# ────── Storage ──────
class PresignedUrlRequest(BaseModel):
    filename: str
    content_type: str

# ────── Reports ──────
class ReportGenerate(BaseModel):
    start_date: UtcDatetime
    end_date: UtcDatetime
    heatmap_image_key: Optional[str] = None

# ────── Onboarding ──────
class OnboardingCondition(BaseModel):
    name: str
    body_region: BodyRegion
    onset_date: Optional[UtcDatetime] = None

class OnboardingMedication(BaseModel):
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    started_at: Optional[UtcDatetime] = None
    stopped_at: Optional[UtcDatetime] = None
    photo_key: Optional[str] = None

class OnboardingComplete(BaseModel):
    import_demo: bool
    conditions: list[OnboardingCondition] = []
    medical_history: str = ""
    medications: list[OnboardingMedication] = []


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_response(u) -> dict[str, Any]:
    return {"id": str(u.id), "email": u.email, "display_name": u.display_name, "created_at": iso(u.created_at)}


def symptom_response(s) -> dict[str, Any]:
    return {"id": str(s.id), "journal_entry_id": str(s.journal_entry_id) if s.journal_entry_id else None,
            "body_region": s.body_region, "title": s.title, "notes": s.notes, "severity": s.severity,
            "started_at": iso(s.started_at), "ended_at": iso(s.ended_at), "tags": s.tags or [],
            "category": s.category, "vitals_json": s.vitals_json, "activity_json": s.activity_json,
            "created_at": iso(s.created_at), "updated_at": iso(s.updated_at)}


def condition_response(c) -> dict[str, Any]:
    return {"id": str(c.id), "name": c.name, "description": c.description, "body_region": c.body_region,
            "onset_date": iso(c.onset_date), "status": c.status,
            "created_at": iso(c.created_at), "updated_at": iso(c.updated_at)}


def journal_response(j, with_symptoms: bool = True) -> dict[str, Any]:
    out = {"id": str(j.id), "raw_text": j.raw_text, "parse_status": j.parse_status,
           "parsed_at": iso(j.parsed_at), "created_at": iso(j.created_at), "updated_at": iso(j.updated_at)}
    if with_symptoms:
        out["symptoms"] = [symptom_response(s) for s in j.symptom_entries]
    return out
