import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import llm
from auth import get_current_user
from database import get_db
from extraction import parse_journal_entry
from models import Condition, JournalEntry, Medication, SymptomEntry, User
from schemas import CustomReportRequest, ParseRequest, journal_response, symptom_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _failure(error: str, e: Exception) -> JSONResponse:
    logger.error("%s: %s", error, e)
    return JSONResponse(status_code=500, content={"error": error, "message": str(e) or "Unknown error"})


@router.post("/parse")
def parse_entry(body: ParseRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry = db.query(JournalEntry).filter(JournalEntry.id == body.journal_entry_id,
                                          JournalEntry.user_id == user.id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Journal entry not found")

    if entry.parse_status == "PARSED":
        return {"message": "Already parsed", "entry": journal_response(entry)}

    try:
        created = parse_journal_entry(db, entry)
    except llm.LLMError as e:
        return _failure("AI parsing failed", e)

    return {"entry": journal_response(entry, with_symptoms=False),
            "symptoms": [symptom_response(s) for s in created]}


@router.post("/analyze-symptoms")
def analyze_symptoms(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    recent = (
        db.query(SymptomEntry)
        .filter(SymptomEntry.user_id == user.id, SymptomEntry.category == "SYMPTOM")
        .order_by(SymptomEntry.created_at.desc())
        .limit(20)
        .all()
    )
    if not recent:
        raise HTTPException(status_code=400, detail="No symptoms found to analyze")

    try:
        return {"insights": llm.analyze_symptoms(recent)}
    except llm.LLMError as e:
        return _failure("Symptom analysis failed", e)


@router.post("/generate-report")
def generate_report(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    def entries(category, limit):
        return (
            db.query(SymptomEntry)
            .filter(SymptomEntry.user_id == user.id, SymptomEntry.category == category)
            .order_by(SymptomEntry.created_at.desc())
            .limit(limit)
            .all()
        )

    conditions = db.query(Condition).filter(Condition.user_id == user.id).all()
    medications = db.query(Medication).filter(Medication.user_id == user.id).all()

    try:
        report = llm.generate_health_summary(conditions, medications, entries("SYMPTOM", 30), entries("VITAL", 10))
    except llm.LLMError as e:
        return _failure("Report generation failed", e)
    return {"report": report}


@router.post("/report")
def custom_report(body: CustomReportRequest, user: User = Depends(get_current_user)):
    try:
        return {"result": llm.explain_text(body.text, body.instruction)}
    except llm.LLMError as e:
        return _failure("Report generation failed", e)
