from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models import BODY_REGIONS, REGION_DISPLAY_NAMES, Condition, SymptomEntry, User, utcnow
from schemas import condition_response, symptom_response

router = APIRouter(prefix="/api/regions", tags=["regions"])

RECENT_DAYS = 30


def region_summary(conditions) -> list[dict]:
    """One heatmap row per body region; ``conditions`` arrive newest first."""
    by_region = {region: [] for region in BODY_REGIONS}
    for c in conditions:
        by_region.setdefault(c.body_region, []).append(c.name)
    return [
        {"region": region, "display_name": REGION_DISPLAY_NAMES[region],
         "count": len(by_region[region]), "conditions": by_region[region]}
        for region in BODY_REGIONS
    ]


@router.get("/summary")
def summary(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    conditions = (
        db.query(Condition)
        .filter(Condition.user_id == user.id)
        .order_by(Condition.created_at.desc())
        .all()
    )
    return {"regions": region_summary(conditions)}


@router.get("/{region}")
def region_detail(region: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if region not in BODY_REGIONS:
        raise HTTPException(status_code=400, detail="Invalid body region")

    since = utcnow() - timedelta(days=RECENT_DAYS)
    symptoms = (
        db.query(SymptomEntry)
        .filter(SymptomEntry.user_id == user.id, SymptomEntry.body_region == region,
                SymptomEntry.created_at >= since)
        .order_by(SymptomEntry.created_at.desc())
        .all()
    )
    conditions = (
        db.query(Condition)
        .filter(Condition.user_id == user.id, Condition.body_region == region)
        .order_by(Condition.created_at.desc())
        .all()
    )
    return {
        "region": region,
        "display_name": REGION_DISPLAY_NAMES[region],
        "symptoms": [symptom_response(s) for s in symptoms],
        "conditions": [condition_response(c) for c in conditions],
    }
