import logging
import uuid

from sqlalchemy.orm import Session

import llm
from database import SessionLocal
from models import JournalEntry, SymptomEntry, utcnow

logger = logging.getLogger(__name__)


def parse_journal_entry(db: Session, entry: JournalEntry) -> list[SymptomEntry]:
    """Run extraction for one entry and store the results.

    On any extraction failure the entry is marked ERROR and ``llm.LLMError`` is
    raised; a reply that cannot be normalised counts as a model failure.
    """
    try:
        items = llm.extract_health_items(entry.raw_text)
    except Exception as e:
        entry.parse_status = "ERROR"
        db.commit()
        if isinstance(e, llm.LLMError):
            raise
        raise llm.LLMError(f"Unusable model reply: {e}") from e

    created = []
    for item in items:
        row = SymptomEntry(id=uuid.uuid4(), user_id=entry.user_id, journal_entry_id=entry.id,
                           started_at=entry.created_at, **item)
        db.add(row)
        created.append(row)

    entry.parse_status = "PARSED"
    entry.parsed_at = utcnow()
    db.commit()
    for row in created:
        db.refresh(row)
    db.refresh(entry)
    return created


def parse_in_background(entry_id: uuid.UUID):
    """BackgroundTasks target: owns its own DB session."""
    db = SessionLocal()
    try:
        entry = db.get(JournalEntry, entry_id)
        if entry is None or entry.parse_status == "PARSED":
            return
        parse_journal_entry(db, entry)
    except llm.LLMError as e:
        logger.error("Background AI parsing failed for %s: %s", entry_id, e)
    finally:
        db.close()
